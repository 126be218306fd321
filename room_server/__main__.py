import argparse
import asyncio
import logging
import os

from holdem.models import TableConfig
from .config import DEFAULT_HOST_PASSWORD, DEFAULT_PORT, ServerConfig
from .server import RoomServer


def main() -> None:
    # Table defaults apply to every room created after startup; hosts tune their own copy.
    parser = argparse.ArgumentParser(description="Multiplayer Texas Hold'em room server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", DEFAULT_PORT)))
    parser.add_argument(
        "--host-password",
        default=os.environ.get("HOST_PASSWORD", DEFAULT_HOST_PASSWORD),
        help="Key a joining player must present to become host of an unhosted room",
    )
    parser.add_argument("--small-blind", type=int, default=5)
    parser.add_argument("--big-blind", type=int, default=10)
    parser.add_argument("--initial-stack", type=int, default=1_000)
    parser.add_argument("--max-players", type=int, default=10)
    parser.add_argument("--speed-ms", type=int, default=700, help="Delay before street advances and bot turns")
    parser.add_argument(
        "--require-profile",
        action="store_true",
        help="Reject actions from players who have not sent SET_PROFILE",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    table = TableConfig(
        small_blind=args.small_blind,
        big_blind=args.big_blind,
        max_players=args.max_players,
        initial_stack=args.initial_stack,
        speed_ms=args.speed_ms,
    )
    config = ServerConfig(
        host=args.host,
        port=args.port,
        host_password=args.host_password,
        table=table,
        require_profile=args.require_profile,
    )
    server = RoomServer(config)
    asyncio.run(server.start())


if __name__ == "__main__":
    main()
