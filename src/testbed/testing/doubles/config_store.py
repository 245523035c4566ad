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
"""InMemoryConfigStore: configuration double for the three config scopes."""

from __future__ import annotations

from enum import Enum
from typing import Any

NOT_FOUND: Any = object()


class ConfigScope(Enum):
    APP = "app"
    USER = "user"
    SYSTEM = "system"


class InMemoryConfigStore:
    """Application, per-user and system values kept in one flat dict.

    Values are stored under tuple keys made of the scope name followed by
    its qualifying parts::

        ("app", <app_name>, <key>)
        ("user", <user_id>, <app_name>, <key>)
        ("system", <key>)

    so an app name or user id may contain any character without reaching
    into another scope's values.

    A read that finds nothing asks :meth:`lookup_default` before falling
    back to the caller's default. Subclasses override that hook to provide
    environment specific values, e.g.::

        class CloudConfig(InMemoryConfigStore):
            def lookup_default(self, scope, *parts):
                if scope is ConfigScope.SYSTEM and parts == ("datadirectory",):
                    return "/tmp/cloud-data"
                return NOT_FOUND
    """

    def __init__(self, values: dict[tuple[str, ...], Any] | None = None) -> None:
        self._values: dict[tuple[str, ...], Any] = dict(values or {})

    def lookup_default(self, scope: ConfigScope, *parts: str) -> Any:
        """Hook consulted on a miss. Return :data:`NOT_FOUND` to use the caller's default."""
        return NOT_FOUND

    def _key(self, scope: ConfigScope, *parts: str) -> tuple[str, ...]:
        return (scope.value, *parts)

    def _get(self, scope: ConfigScope, parts: tuple[str, ...], default: Any) -> Any:
        key = self._key(scope, *parts)
        if key in self._values:
            return self._values[key]
        value = self.lookup_default(scope, *parts)
        return default if value is NOT_FOUND else value

    def _keys(self, scope: ConfigScope, *parts: str) -> list[str]:
        prefix = self._key(scope, *parts)
        depth = len(prefix)
        return [key[depth] for key in self._values if len(key) == depth + 1 and key[:depth] == prefix]

    # -- application values ------------------------------------------------

    def get_app_value(self, app_name: str, key: str, default: Any = "") -> Any:
        return self._get(ConfigScope.APP, (app_name, key), default)

    def set_app_value(self, app_name: str, key: str, value: Any) -> None:
        self._values[self._key(ConfigScope.APP, app_name, key)] = value

    def delete_app_value(self, app_name: str, key: str) -> None:
        self._values.pop(self._key(ConfigScope.APP, app_name, key), None)

    def get_app_keys(self, app_name: str) -> list[str]:
        return self._keys(ConfigScope.APP, app_name)

    # -- per-user values ---------------------------------------------------

    def get_user_value(self, user_id: str, app_name: str, key: str, default: Any = "") -> Any:
        return self._get(ConfigScope.USER, (user_id, app_name, key), default)

    def set_user_value(self, user_id: str, app_name: str, key: str, value: Any) -> None:
        self._values[self._key(ConfigScope.USER, user_id, app_name, key)] = value

    def delete_user_value(self, user_id: str, app_name: str, key: str) -> None:
        self._values.pop(self._key(ConfigScope.USER, user_id, app_name, key), None)

    def get_user_keys(self, user_id: str, app_name: str) -> list[str]:
        return self._keys(ConfigScope.USER, user_id, app_name)

    # -- system values -----------------------------------------------------

    def get_system_value(self, key: str, default: Any = "") -> Any:
        return self._get(ConfigScope.SYSTEM, (key,), default)

    def set_system_value(self, key: str, value: Any) -> None:
        self._values[self._key(ConfigScope.SYSTEM, key)] = value

    def delete_system_value(self, key: str) -> None:
        self._values.pop(self._key(ConfigScope.SYSTEM, key), None)
