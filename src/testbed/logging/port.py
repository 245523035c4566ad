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
"""The logging contract handed out by the ``testbed_logging`` fixture."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from testbed.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """Sets up logging for one test run.

    Fixtures and plugins depend on this protocol rather than on a concrete
    adapter, so a project may swap the structlog based one for its own.
    """

    def configure(self, config: Config) -> None:
        """Apply the ``testbed.logging`` section: levels, format and run log file."""
        ...

    def get_logger(self, name: str) -> Any: ...

    def set_level(self, name: str, level: str) -> None:
        """Change the threshold of a single logger, e.g. ``testbed.database``."""
        ...

    @property
    def log_file(self) -> Path | None:
        """Where the run log is written, or ``None`` when only the console is used."""
        ...
