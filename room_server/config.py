from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field

from holdem.models import TableConfig

DEFAULT_PORT = 5174
DEFAULT_HOST_PASSWORD = "host123"


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    host_password: str = DEFAULT_HOST_PASSWORD
    table: TableConfig = field(default_factory=TableConfig)
    require_profile: bool = False

    def table_for_new_room(self) -> TableConfig:
        # Each room tunes its own copy.
        return dataclasses.replace(self.table)
