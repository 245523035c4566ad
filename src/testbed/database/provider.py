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
"""Ephemeral MariaDB server for integration tests.

A :class:`DatabaseProvider` owns at most one throwaway server at a time:
it initialises a fresh data directory in a temporary folder, launches the
server listening on a unix socket only, waits for it to report readiness,
creates the test accounts and databases, and kills everything again on
:meth:`DatabaseProvider.stop_server`. Nothing is retried; a failing test
environment fails the run.
"""

from __future__ import annotations

import getpass
import logging
import select
import time
from pathlib import Path
from typing import Any

from testbed.config.properties.database import DatabaseProperties
from testbed.config.properties.harness import HarnessProperties
from testbed.core.config import Config
from testbed.database.executables import ExecutableFinder
from testbed.database.process import ProcessRunner
from testbed.database.tempfiles import TempManager
from testbed.database.types import DatabaseConfig, DatabasePurpose, ServerSession
from testbed.kernel.exceptions import DatabaseNotRunningError, DatabaseStartupError

logger = logging.getLogger(__name__)

DEFAULTS_FILE_CONTENTS = "[server]\nskip-networking\n"

CONNECTOR_SUFFIX = "_cloud_connector"

_UNLIMITED = (
    "REQUIRE NONE WITH MAX_QUERIES_PER_HOUR 0 MAX_CONNECTIONS_PER_HOUR 0 "
    "MAX_UPDATES_PER_HOUR 0 MAX_USER_CONNECTIONS 0"
)


class DatabaseProvider:
    """Setup a real database server in order to avoid excessive mocking."""

    def __init__(
        self,
        app_name: str,
        artifacts_dir: str | Path,
        properties: DatabaseProperties | None = None,
        executable_finder: ExecutableFinder | None = None,
        temp_manager: TempManager | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        self.app_name = app_name
        self.artifacts_dir = Path(artifacts_dir)
        self.properties = properties or DatabaseProperties()
        self._finder = executable_finder or ExecutableFinder.from_search_path(self.properties.search_path)
        self._temp = temp_manager or TempManager(self.properties.temp_base_dir or None)
        self._runner = runner or ProcessRunner()
        self._session: ServerSession | None = None
        self._database_config: DatabaseConfig | None = None
        self._temp.clean_old(self.properties.temp_max_age)

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> DatabaseProvider:
        harness = config.bind(HarnessProperties)
        return cls(
            app_name=harness.app_name,
            artifacts_dir=harness.artifacts_dir,
            properties=config.bind(DatabaseProperties),
            **kwargs,
        )

    @property
    def is_running(self) -> bool:
        return self._session is not None and self._session.process is not None

    @property
    def session(self) -> ServerSession | None:
        return self._session

    def __enter__(self) -> DatabaseProvider:
        self.start_server()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop_server()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_server(self) -> dict[str, Any]:
        """Setup a clean database and start a server on it.

        Returns:
            Paths and identities of the new session: ``db_folder``,
            ``db_data_dir``, ``server_socket_file``, ``server_pid_file``,
            ``server_error_file``, ``unix_user``, ``db_user`` and
            ``db_password``.

        Raises:
            ExecutableNotFoundError: one of the database tools is missing.
            ProcessFailedError: data directory setup or bootstrap SQL failed.
            DatabaseStartupError: the server did not become ready in time.
        """
        self.stop_server()

        props = self.properties
        session = ServerSession(folder=self._temp.get_temporary_folder())
        self._session = session
        unix_user = getpass.getuser()

        try:
            setup_binary = self._finder.find(props.setup_tool)
            server_binary = self._finder.find(props.server_tool)

            self._runner.run([
                setup_binary,
                f"--basedir={props.base_dir}",
                f"--datadir={session.data_dir}",
                f"--user={unix_user}",
                "--no-defaults",
            ])

            session.defaults_file.write_text(DEFAULTS_FILE_CONTENTS)

            session.process = self._runner.start([
                server_binary,
                f"--defaults-file={session.defaults_file}",
                f"--basedir={props.base_dir}",
                "--core-file-size=0",
                f"--datadir={session.data_dir}",
                f"--user={unix_user}",
                "--skip-syslog",
                f"--socket={session.socket_file}",
                f"--pid-file={session.pid_file}",
                f"--log-error={session.error_file}",
            ])

            self._wait_for_error_log(session)
            server_feedback = self._wait_until_ready(session)
            session.server_pid = self._read_server_pid(session, server_feedback)

            self._runner.run(
                [
                    self._finder.find(props.client_tool),
                    "--protocol=SOCKET",
                    f"--socket={session.socket_file}",
                    f"--user={unix_user}",
                ],
                input=self.bootstrap_sql(),
            )
        except BaseException:
            self.stop_server()
            raise

        logger.info("Database server ready: %s", server_feedback)

        return {
            "db_folder": session.folder,
            "db_data_dir": session.data_dir,
            "server_socket_file": session.socket_file,
            "server_pid_file": session.pid_file,
            "server_error_file": session.error_file,
            "unix_user": unix_user,
            "db_user": props.user,
            "db_password": props.password,
        }

    def stop_server(self) -> None:
        """Stop a running server and remove all associated data.

        The server is killed, not shut down: the data is thrown away anyway.
        Calling this without a running server does nothing.
        """
        session = self._session
        if session is None:
            return

        if session.process is not None:
            self._runner.kill(session.process)
        if session.server_pid is not None and session.server_pid > 0:
            self._runner.kill_pid(session.server_pid)
        self._temp.clean()

        self._session = None
        self._database_config = None
        logger.debug("Database server stopped")

    def _wait_for_error_log(self, session: ServerSession) -> None:
        props = self.properties
        remaining = props.log_wait_iterations
        while not session.error_file.exists() and remaining > 0:
            remaining -= 1
            time.sleep(props.log_wait_interval)
        if not session.error_file.exists():
            launcher_output = ""
            if session.process is not None:
                launcher_output = self._runner.error_output(session.process)
            raise DatabaseStartupError(
                "Server might not have been started successfully, no error log was written",
                log_tail=launcher_output,
            )

    def _wait_until_ready(self, session: ServerSession) -> str:
        """Follow the error log until the ready marker shows up."""
        props = self.properties
        with open(session.error_file, "rb") as error_fp:
            for _ in range(props.ready_iterations):
                select.select([error_fp], [], [], props.select_timeout)
                chunk_size = max(4096, session.error_file.stat().st_size)
                for _ in range(10):
                    if not error_fp.read(chunk_size):
                        break
                server_feedback = session.error_file.read_text(errors="replace")
                if props.ready_marker in server_feedback:
                    return server_feedback
                time.sleep(props.ready_poll_interval)

        raise DatabaseStartupError(
            "Unable to setup database server",
            log_tail=session.error_file.read_text(errors="replace"),
        )

    @staticmethod
    def _read_server_pid(session: ServerSession, server_feedback: str) -> int:
        try:
            return int(session.pid_file.read_text().strip())
        except (OSError, ValueError) as exc:
            raise DatabaseStartupError(
                f"Unable to read the server pid from {session.pid_file}",
                log_tail=server_feedback,
            ) from exc

    def bootstrap_sql(self) -> str:
        """Account and database provisioning executed once per session."""
        props = self.properties
        db_user = props.user
        cloud_user = props.cloud_user
        password = props.password
        app_db = self.database_name(DatabasePurpose.APP)
        connector_db = self.database_name(DatabasePurpose.CLOUD_CONNECTOR)
        return "\n".join([
            "DELETE FROM mysql.user WHERE USER = '';",
            f"CREATE USER '{db_user}'@'%' IDENTIFIED BY '{password}';",
            f"GRANT USAGE ON *.* TO '{db_user}'@'%' {_UNLIMITED};",
            f"CREATE USER '{cloud_user}'@'%' IDENTIFIED BY '{password}';",
            f"GRANT USAGE ON *.* TO '{cloud_user}'@'%' {_UNLIMITED};",
            f"CREATE USER '{cloud_user}'@'localhost' IDENTIFIED BY '{password}';",
            f"GRANT USAGE ON *.* TO '{cloud_user}'@'localhost' {_UNLIMITED};",
            f"CREATE DATABASE {app_db};",
            f"CREATE DATABASE {connector_db};",
            f"GRANT ALL PRIVILEGES ON {app_db}.* TO {db_user}@`%` WITH GRANT OPTION;",
            f"GRANT ALL PRIVILEGES ON `{app_db}\\_%`.* TO {db_user}@`%` WITH GRANT OPTION;",
            "FLUSH PRIVILEGES;",
            "",
        ])

    # ------------------------------------------------------------------
    # Databases
    # ------------------------------------------------------------------

    def database_name(self, which: DatabasePurpose) -> str:
        name = self.app_name
        if which == DatabasePurpose.CLOUD_CONNECTOR:
            name += CONNECTOR_SUFFIX
        return name

    def dump_database(self, which: DatabasePurpose, dump_file_base: str) -> Path:
        """Dump the given database, routines included, into the artifacts directory.

        Returns:
            The path of the written ``<dump_file_base>-<database>.sql`` file.
        """
        session = self._require_session("dump the database")
        db_name = self.database_name(which)
        result = self._runner.run([
            self._finder.find(self.properties.dump_tool),
            "--protocol=SOCKET",
            f"--socket={session.socket_file}",
            f"--user={getpass.getuser()}",
            "--routines",
            db_name,
        ])
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)
        dump_file = self.artifacts_dir / f"{dump_file_base}-{db_name}.sql"
        dump_file.write_text(result.stdout)
        logger.info("Dumped database %s to %s", db_name, dump_file)
        return dump_file

    def load_sql(self, which: DatabasePurpose, sql_file: str | Path) -> None:
        """Feed an SQL script to the client connected to the given database."""
        session = self._require_session("load SQL")
        sql = Path(sql_file).read_text()
        self._runner.run(
            [
                self._finder.find(self.properties.client_tool),
                "--protocol=SOCKET",
                f"--socket={session.socket_file}",
                f"--user={getpass.getuser()}",
                self.database_name(which),
            ],
            input=sql,
        )

    def get_database_config(self) -> DatabaseConfig | None:
        """Connection descriptor of the running server, ``None`` if none runs."""
        if not self.is_running:
            return None
        if self._database_config is not None:
            return self._database_config
        assert self._session is not None
        self._database_config = DatabaseConfig.for_socket(
            self._session.socket_file,
            database_name=self.database_name(DatabasePurpose.APP),
            user=self.properties.user,
            password=self.properties.password,
        )
        return self._database_config

    def _require_session(self, operation: str) -> ServerSession:
        if not self.is_running:
            raise DatabaseNotRunningError(operation)
        assert self._session is not None
        return self._session
