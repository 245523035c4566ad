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
"""Locate the external database tools."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from testbed.kernel.exceptions import ExecutableNotFoundError


class ExecutableFinder:
    """Maps a logical tool name to the path of an executable.

    Explicit ``overrides`` win; otherwise ``extra_paths`` are searched before
    the regular ``PATH``. Results are cached per tool name.
    """

    def __init__(
        self,
        extra_paths: list[str | Path] | None = None,
        overrides: dict[str, str | Path] | None = None,
    ) -> None:
        self._extra_paths = [str(p) for p in extra_paths or []]
        self._overrides = {name: str(path) for name, path in (overrides or {}).items()}
        self._cache: dict[str, str] = {}

    @classmethod
    def from_search_path(cls, search_path: str) -> ExecutableFinder:
        """Build a finder from an ``os.pathsep`` separated directory list."""
        return cls(extra_paths=[p for p in search_path.split(os.pathsep) if p])

    def find(self, tool: str) -> str:
        """Return the absolute path of *tool*.

        Raises:
            ExecutableNotFoundError: the tool is not installed.
        """
        if tool in self._cache:
            return self._cache[tool]

        override = self._overrides.get(tool)
        if override is not None:
            if not os.access(override, os.X_OK):
                raise ExecutableNotFoundError(tool, searched=[override])
            self._cache[tool] = override
            return override

        search = [*self._extra_paths, os.environ.get("PATH", os.defpath)]
        found = shutil.which(tool, path=os.pathsep.join(search))
        if found is None:
            raise ExecutableNotFoundError(tool, searched=self._extra_paths + ["$PATH"])
        self._cache[tool] = found
        return found
