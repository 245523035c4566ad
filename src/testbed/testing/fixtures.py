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
"""pytest plugin: session-scoped harness state, database server and mock providers.

Registered through the ``pytest11`` entry point, so the fixtures are
available in every project that has testbed installed. Projects embedding a
real host runtime override :func:`server_container` in their
``conftest.py`` to return the runtime's process-wide registry.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from testbed.config.properties.harness import HarnessProperties
from testbed.container.container import ServerContainer
from testbed.core.config import Config
from testbed.database.provider import DatabaseProvider
from testbed.kernel.exceptions import ExecutableNotFoundError
from testbed.logging.port import LoggingPort
from testbed.logging.structlog_adapter import StructlogAdapter
from testbed.testing.harness import HarnessSession
from testbed.testing.mock_provider import MockProvider


@pytest.fixture(scope="session")
def testbed_config(pytestconfig: pytest.Config) -> Config:
    """Configuration merged from the package defaults and ``testbed.yaml``."""
    return Config.from_sources(pytestconfig.rootpath)


@pytest.fixture(scope="session")
def testbed_logging(testbed_config: Config) -> LoggingPort:
    adapter: LoggingPort = StructlogAdapter()
    adapter.configure(testbed_config)
    return adapter


@pytest.fixture(scope="session")
def harness_session() -> Iterator[HarnessSession]:
    session = HarnessSession()
    yield session
    session.reset()


@pytest.fixture(scope="session")
def server_container(testbed_config: Config) -> ServerContainer:
    """The process-wide registry with the module under test attached."""
    props = testbed_config.bind(HarnessProperties)
    server = ServerContainer()
    server.register_app_container(props.app_name)
    return server


@pytest.fixture(scope="session")
def database_provider(testbed_config: Config, testbed_logging: LoggingPort) -> Iterator[DatabaseProvider]:
    """A running throwaway database server, shared by the whole session.

    Skips the requesting tests when the database tools are not installed.
    """
    provider = DatabaseProvider.from_config(testbed_config)
    try:
        provider.start_server()
    except ExecutableNotFoundError as exc:
        pytest.skip(str(exc))
    yield provider
    provider.stop_server()


@pytest.fixture
def mock_provider(
    harness_session: HarnessSession,
    server_container: ServerContainer,
    testbed_config: Config,
) -> MockProvider:
    return MockProvider.create(harness_session, server_container, testbed_config)
