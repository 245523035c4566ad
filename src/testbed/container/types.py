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
"""Container types and enums."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, auto
from typing import Any, TypeAlias

ServiceIdentifier: TypeAlias = str | type
ServiceFactory: TypeAlias = Callable[[], Any]


class Scope(Enum):
    """Service lifecycle scope."""

    SINGLETON = auto()
    TRANSIENT = auto()


def service_key(identifier: ServiceIdentifier) -> str:
    """Normalise a service identifier to its registry key.

    Strings are used verbatim, classes become ``"<module>.<qualname>"`` so
    the dotted namespace of the key tells which module a service belongs to.
    """
    if isinstance(identifier, str):
        return identifier
    if isinstance(identifier, type):
        return f"{identifier.__module__}.{identifier.__qualname__}"
    raise TypeError(f"Unsupported service identifier: {identifier!r}")
