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
"""Ephemeral database server configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from testbed.core.config import config_properties


@config_properties(prefix="testbed.database")
@dataclass
class DatabaseProperties:
    """Configuration for the throwaway MariaDB server (testbed.database.*)."""

    setup_tool: str = "mariadb-install-db"
    server_tool: str = "mariadbd-safe"
    client_tool: str = "mariadb"
    dump_tool: str = "mariadb-dump"
    base_dir: str = "/usr"
    search_path: str = ""
    user: str = "phpunit"
    cloud_user: str = "nextcloud"
    password: str = "nothing"
    ready_marker: str = "ready for connections"
    # Waiting for the error log to appear: iterations x interval seconds.
    log_wait_iterations: int = 10000
    log_wait_interval: float = 0.00001
    # Waiting for the ready marker: iterations x (select + poll interval).
    ready_iterations: int = 10000
    ready_poll_interval: float = 0.001
    select_timeout: float = 1.0
    temp_base_dir: str = ""
    temp_max_age: int = 86400
