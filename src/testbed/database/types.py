# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Value types of the ephemeral database server."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from urllib.parse import parse_qs, quote, urlsplit

from sqlalchemy.engine import URL

URL_SCHEME = "pdo-mysql"
URL_HOST = "localhost"


class DatabasePurpose(Enum):
    """Which of the two databases of a session an operation targets."""

    APP = "app"
    CLOUD_CONNECTOR = "cloud_connector"


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection descriptor handed to data access code under test.

    ``database_server`` is a synthetic URL; scheme and host are sentinels
    understood by the consuming data access layer, the server is only
    reachable through the unix socket named in the query string.
    """

    database_name: str
    database_server: str
    database_user: str
    database_password: str

    @classmethod
    def for_socket(cls, socket_file: str | Path, database_name: str, user: str, password: str) -> DatabaseConfig:
        socket = quote(str(socket_file), safe="")
        url = f"{URL_SCHEME}://{user}:{password}@{URL_HOST}?unix_socket={socket}"
        return cls(
            database_name=database_name,
            database_server=url,
            database_user=user,
            database_password=password,
        )

    @property
    def socket_path(self) -> str:
        """The unix socket path encoded in :attr:`database_server`."""
        return parse_qs(urlsplit(self.database_server).query)["unix_socket"][0]

    def sqlalchemy_url(self, drivername: str = "mysql+pymysql") -> URL:
        """Express the descriptor as a SQLAlchemy URL for ``create_engine``."""
        return URL.create(
            drivername,
            username=self.database_user,
            password=self.database_password,
            database=self.database_name,
            query={"unix_socket": self.socket_path},
        )


@dataclass
class ServerSession:
    """Paths and processes of one running server. At most one per provider."""

    folder: Path
    process: subprocess.Popen | None = field(default=None, repr=False)
    server_pid: int | None = None

    @property
    def data_dir(self) -> Path:
        return self.folder / "db-data"

    @property
    def socket_file(self) -> Path:
        return self.folder / "server-socket"

    @property
    def pid_file(self) -> Path:
        return self.folder / "server.pid"

    @property
    def error_file(self) -> Path:
        return self.folder / "server.err"

    @property
    def defaults_file(self) -> Path:
        return self.folder / "mariadbd.cnf"
