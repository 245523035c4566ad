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
"""Ports of the host platform services that tests commonly replace."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

USER_ID = "user_id"
APP_NAME = "app_name"


@runtime_checkable
class User(Protocol):
    """An authenticated cloud user."""

    def get_uid(self) -> str: ...

    def get_display_name(self) -> str: ...

    def get_email_address(self) -> str | None: ...


@runtime_checkable
class Session(Protocol):
    """Server-side session storage of the current request."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...

    def exists(self, key: str) -> bool: ...


@runtime_checkable
class UserSession(Protocol):
    """Binds the current user to the current session."""

    def get_user(self) -> User | None: ...

    def get_session(self) -> Session: ...

    def is_logged_in(self) -> bool: ...


@runtime_checkable
class Request(Protocol):
    """The HTTP request currently being served."""

    def get_path_info(self) -> str | None: ...

    def get_param(self, key: str, default: Any = None) -> Any: ...

    def get_header(self, name: str) -> str: ...

    def get_method(self) -> str: ...


@runtime_checkable
class ConfigStore(Protocol):
    """Application, per-user and system-wide configuration values."""

    def get_app_value(self, app_name: str, key: str, default: Any = "") -> Any: ...

    def set_app_value(self, app_name: str, key: str, value: Any) -> None: ...

    def delete_app_value(self, app_name: str, key: str) -> None: ...

    def get_app_keys(self, app_name: str) -> list[str]: ...

    def get_user_value(self, user_id: str, app_name: str, key: str, default: Any = "") -> Any: ...

    def set_user_value(self, user_id: str, app_name: str, key: str, value: Any) -> None: ...

    def delete_user_value(self, user_id: str, app_name: str, key: str) -> None: ...

    def get_user_keys(self, user_id: str, app_name: str) -> list[str]: ...

    def get_system_value(self, key: str, default: Any = "") -> Any: ...

    def set_system_value(self, key: str, value: Any) -> None: ...

    def delete_system_value(self, key: str) -> None: ...


@runtime_checkable
class Localisation(Protocol):
    """Translates user visible strings for one application and language."""

    def t(self, text: str, args: tuple[Any, ...] = ()) -> str: ...

    def get_language_code(self) -> str: ...


@runtime_checkable
class LoginCredentials(Protocol):
    def get_uid(self) -> str: ...

    def get_login_name(self) -> str: ...

    def get_password(self) -> str | None: ...


@runtime_checkable
class CredentialsStore(Protocol):
    """Hands out the credentials of the user logged in for this request."""

    def get_login_credentials(self) -> LoginCredentials: ...


@runtime_checkable
class TimeZoneProvider(Protocol):
    """Environment bound singleton: the time zone of the current request."""

    def get_time_zone(self, timestamp: float | None = None) -> Any: ...


@runtime_checkable
class UrlGenerator(Protocol):
    """Environment bound singleton: builds absolute and routed URLs."""

    def link_to_route(self, route_name: str, **arguments: Any) -> str: ...

    def get_absolute_url(self, url: str) -> str: ...
