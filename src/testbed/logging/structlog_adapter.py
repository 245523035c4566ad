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
"""StructlogAdapter: default LoggingPort implementation using structlog."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import structlog

from testbed.config.properties.logging import LoggingProperties
from testbed.core.config import Config

TEST_RUN_START = "*** TEST RUN START ***"


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


class StructlogAdapter:
    """Default logging adapter backed by structlog.

    Records go through stdlib logging to stdout and, when
    ``testbed.logging.file`` is set, to a log file as well (normally in the
    test artifacts directory) so server and harness activity can be
    inspected after a failed run.
    """

    def __init__(self) -> None:
        self._root_level = "INFO"
        self._module_levels: dict[str, str] = {}
        self._format = "console"
        self._file: Path | None = None

    @property
    def log_file(self) -> Path | None:
        return self._file

    def configure(self, config: Config) -> None:
        """Configure structlog and the stdlib root logger from ``testbed.logging``."""
        levels = dict(config.get_section("testbed.logging.level"))
        self._root_level = str(levels.pop("root", "INFO")).upper()
        self._module_levels = {name: str(level).upper() for name, level in levels.items()}

        props = config.bind(LoggingProperties)
        self._format = props.format.lower()
        self._file = Path(props.file) if props.file else None

        structlog.configure(
            processors=self._processors(),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(
            format="%(message)s",
            handlers=self._handlers(),
            level=_level(self._root_level),
            force=True,
        )
        for name, level in self._module_levels.items():
            self.set_level(name, level)

        if self._file is not None:
            self.get_logger("testbed").info(TEST_RUN_START)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Set the level of one stdlib logger, e.g. ``testbed.database``."""
        logging.getLogger(name).setLevel(_level(level))

    def _processors(self) -> list[structlog.types.Processor]:
        renderer: structlog.types.Processor
        if self._format == "json":
            renderer = structlog.processors.JSONRenderer()
        else:
            renderer = structlog.dev.ConsoleRenderer(colors=False)
        return [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            renderer,
        ]

    def _handlers(self) -> list[logging.Handler]:
        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        if self._file is not None:
            self._file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self._file, encoding="utf-8"))
        return handlers
