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
"""Layered test configuration: YAML/TOML files, env vars and dataclass binding."""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, get_type_hints

import yaml  # type: ignore[import-untyped]

T = TypeVar("T")

DEFAULTS_RESOURCE = "testbed-defaults.yaml"

_ENV_PREFIX = "TESTBED_"
_FILE_SUFFIXES = (".yaml", ".toml")
_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")
_MAX_PLACEHOLDER_DEPTH = 10
_PREFIX_ATTR = "__testbed_config_prefix__"


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Mark a dataclass as the typed view of the config section at *prefix*.

    Usage:
        @config_properties(prefix="testbed.database")
        @dataclass
        class DatabaseProperties:
            server_tool: str = "mariadbd-safe"
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _PREFIX_ATTR, prefix)
        return cls

    return decorator


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _coerce(value: Any, expected: Any) -> Any:
    """Convert env-var strings to the scalar type a properties field declares."""
    if expected is bool and isinstance(value, str):
        return value.lower() in ("true", "1", "yes")
    if expected is int and isinstance(value, str):
        return int(value)
    if expected is float and isinstance(value, (str, int)):
        return float(value)
    return value


class Config:
    """Nested configuration read with dotted keys.

    A value is looked up in this order:

    1. the environment variable derived from the key
       (``testbed.database.user`` -> ``TESTBED_DATABASE_USER``)
    2. the merged configuration files
    3. the caller's default, or the dataclass default when binding

    String values may reference other keys or environment variables with
    ``${name}`` or ``${name:fallback}``.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """Files merged into this configuration, in merge order."""
        return list(self._loaded_sources)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_sources(
        cls,
        base_dir: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Merge the package defaults with the project's ``testbed`` files.

        Files are looked for in ``<base_dir>/tests`` and then in
        ``<base_dir>`` itself, so the project root wins. ``testbed.yaml`` or
        ``testbed.toml`` come first, then ``testbed-<profile>.*`` for every
        active profile.
        """
        base_dir = Path(base_dir)
        config = cls._with_defaults(load_defaults)
        layers = [("testbed", "")]
        layers += [(f"testbed-{profile}", f" (profile: {profile})") for profile in active_profiles or []]
        for stem, label in layers:
            for search_dir in (base_dir / "tests", base_dir):
                for suffix in _FILE_SUFFIXES:
                    config._merge_file(search_dir / f"{stem}{suffix}", label)
        return config

    @classmethod
    def from_file(cls, path: str | Path, load_defaults: bool = True) -> Config:
        """Merge the package defaults with one YAML or TOML file."""
        config = cls._with_defaults(load_defaults)
        config._merge_file(Path(path))
        return config

    @classmethod
    def _with_defaults(cls, load_defaults: bool) -> Config:
        config = cls()
        if load_defaults:
            resource = importlib.resources.files("testbed.resources").joinpath(DEFAULTS_RESOURCE)
            config._data = yaml.safe_load(resource.read_text(encoding="utf-8")) or {}
            config._loaded_sources.append(f"{DEFAULTS_RESOURCE} (package defaults)")
        return config

    def _merge_file(self, path: Path, label: str = "") -> None:
        if not path.is_file():
            return
        if path.suffix == ".toml":
            with path.open("rb") as fh:
                data = tomllib.load(fh)
        else:
            with path.open(encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        self._data = _deep_merge(self._data, data)
        self._loaded_sources.append(f"{path}{label}")

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value at the dotted *key*, or *default*."""
        env_val = os.environ.get(self._env_key(key))
        if env_val is not None:
            return env_val
        value = self._lookup(key)
        if value is None:
            return default
        if isinstance(value, str) and "${" in value:
            return self._interpolate(value)
        return value

    def get_section(self, prefix: str) -> dict[str, Any]:
        """The raw mapping below *prefix*; empty if there is none."""
        section = self._lookup(prefix)
        return section if isinstance(section, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Build a ``@config_properties`` dataclass from its section.

        Fields are read through :meth:`get`, so environment overrides and
        placeholders apply; absent fields keep their dataclass default.
        """
        prefix = getattr(config_cls, _PREFIX_ATTR, None)
        if prefix is None:
            raise ValueError(f"{config_cls.__name__} is not decorated with @config_properties")

        hints = get_type_hints(config_cls)
        values: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            value = self.get(f"{prefix}.{field.name}")
            if value is not None:
                values[field.name] = _coerce(value, hints.get(field.name))
        return config_cls(**values)

    @staticmethod
    def _env_key(key: str) -> str:
        name = key.removeprefix("testbed.").upper().replace(".", "_").replace("-", "_")
        return _ENV_PREFIX + name

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _interpolate(self, value: str, depth: int = 0) -> str:
        if depth > _MAX_PLACEHOLDER_DEPTH:
            raise ValueError(
                f"Placeholder recursion deeper than {_MAX_PLACEHOLDER_DEPTH} levels in {value!r}; "
                "check for circular references"
            )

        def replace(match: re.Match[str]) -> str:
            ref, has_fallback, fallback = match.group(1).partition(":")
            env_val = os.environ.get(ref)
            if env_val is not None:
                return env_val
            found = self._lookup(ref)
            if found is not None:
                text = str(found)
                return self._interpolate(text, depth + 1) if "${" in text else text
            if has_fallback:
                return fallback
            raise ValueError(f"Cannot resolve placeholder '${{{match.group(1)}}}': not found in environment or config")

        return _PLACEHOLDER_RE.sub(replace, value)
