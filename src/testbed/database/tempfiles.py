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
"""Temporary folders for database sessions."""

from __future__ import annotations

import logging
import shutil
import tempfile
import time
from pathlib import Path

logger = logging.getLogger(__name__)

FOLDER_PREFIX = "testbed-db-"


class TempManager:
    """Hands out temporary folders and removes them again.

    Folders are created under *base_dir* (the system temp directory by
    default) with a common prefix, so folders leaked by a killed test run
    can be found and removed by :meth:`clean_old`.
    """

    def __init__(self, base_dir: str | Path | None = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else Path(tempfile.gettempdir())
        self._folders: list[Path] = []

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def get_temporary_folder(self) -> Path:
        self._base_dir.mkdir(parents=True, exist_ok=True)
        folder = Path(tempfile.mkdtemp(prefix=FOLDER_PREFIX, dir=self._base_dir))
        self._folders.append(folder)
        return folder

    def clean(self) -> None:
        """Remove every folder handed out by this manager."""
        while self._folders:
            folder = self._folders.pop()
            shutil.rmtree(folder, ignore_errors=True)

    def clean_old(self, max_age: float = 86400) -> list[Path]:
        """Remove leftover folders older than *max_age* seconds."""
        if not self._base_dir.is_dir():
            return []
        cutoff = time.time() - max_age
        removed: list[Path] = []
        for candidate in self._base_dir.glob(f"{FOLDER_PREFIX}*"):
            if candidate in self._folders or not candidate.is_dir():
                continue
            if candidate.stat().st_mtime < cutoff:
                shutil.rmtree(candidate, ignore_errors=True)
                removed.append(candidate)
        if removed:
            logger.info("Removed %d stale database folders", len(removed))
        return removed
