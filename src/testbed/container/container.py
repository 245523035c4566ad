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
"""Host service registry: factory slots, autowiring and the admin slot API."""

from __future__ import annotations

import difflib
import inspect
import types
import typing
from typing import Any, TypeVar, Union, get_args, get_origin

from testbed.container.exceptions import CircularDependencyError, ServiceNotFoundError
from testbed.container.identity import IdentitySet
from testbed.container.types import Scope, ServiceFactory, ServiceIdentifier, service_key

T = TypeVar("T")

_MISSING: Any = object()


class Container:
    """Mutable registry mapping service identifiers to zero-argument factories.

    Supports factory registration, class registration with constructor
    injection via type hints, autowiring of unregistered concrete classes,
    identifier aliases, shared (cached) and transient services, and circular
    dependency detection.

    The whole registry state lives in a small slot table:

    ``factories``
        key -> factory callable
    ``instances``
        key -> cached instance of a shared service
    ``transient``
        :class:`IdentitySet` of factories whose results are never cached
    ``aliases``
        key -> identifier the key resolves to

    :meth:`export_slots` and :meth:`import_slots` hand out and replace that
    table. They form the administrative interface test harnesses use to
    roll the registry back between test cases.
    """

    SLOT_NAMES: tuple[str, ...] = ("factories", "instances", "transient", "aliases")

    def __init__(self, name: str = "container") -> None:
        self.name = name
        self._factories: dict[str, ServiceFactory] = {}
        self._instances: dict[str, Any] = {}
        self._transient = IdentitySet()
        self._aliases: dict[str, ServiceIdentifier] = {}
        self._resolving: dict[str, None] = {}  # insertion-ordered, O(1) lookup

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_service(
        self,
        identifier: ServiceIdentifier,
        factory: ServiceFactory,
        shared: bool = True,
    ) -> None:
        """Register *factory* for *identifier*, replacing any previous one.

        A cached instance of the previous registration is dropped so the
        next :meth:`get` goes through the new factory.
        """
        key = service_key(identifier)
        previous = self._factories.get(key)
        if previous is not None:
            self._transient.discard(previous)
        self._factories[key] = factory
        self._instances.pop(key, None)
        if not shared:
            self._transient.add(factory)

    def register(
        self,
        cls: type,
        scope: Scope = Scope.SINGLETON,
        name: str = "",
    ) -> None:
        """Register a class whose constructor dependencies are autowired."""
        self.register_service(
            cls,
            lambda: self._create_instance(cls),
            shared=scope == Scope.SINGLETON,
        )
        if name:
            self.bind(name, cls)

    def register_instance(self, identifier: ServiceIdentifier, instance: Any) -> None:
        """Register an already built shared instance."""
        self.register_service(identifier, lambda: instance)
        self._instances[service_key(identifier)] = instance

    def bind(self, interface: ServiceIdentifier, implementation: ServiceIdentifier) -> None:
        """Make *interface* resolve to whatever *implementation* resolves to."""
        self._aliases[service_key(interface)] = implementation

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def get(self, identifier: ServiceIdentifier) -> Any:
        """Resolve a service instance.

        Raises:
            ServiceNotFoundError: nothing is registered for *identifier* and
                it is not an autowirable concrete class.
        """
        instance = self._resolve_registered(identifier)
        if instance is _MISSING and self.is_autowirable(identifier):
            instance = self._autowire(identifier)  # type: ignore[arg-type]
        if instance is _MISSING:
            raise ServiceNotFoundError(
                identifier,
                registry=self.name,
                suggestions=self._get_similar_names(service_key(identifier)),
            )
        return instance

    def has(self, identifier: ServiceIdentifier) -> bool:
        """Whether a factory, instance or alias is registered for *identifier*."""
        key = service_key(identifier)
        return key in self._factories or key in self._instances or key in self._aliases

    def raw(self, identifier: ServiceIdentifier) -> ServiceFactory | None:
        """Return the factory registered for *identifier*, or ``None``."""
        return self._factories.get(service_key(identifier))

    def keys(self) -> list[str]:
        """All keys that have a factory or a cached instance."""
        return list(dict.fromkeys([*self._factories, *self._instances, *self._aliases]))

    def build(self, cls: type[T]) -> T:
        """Construct a fresh *cls* with autowired dependencies, bypassing the cache."""
        return self._build(service_key(cls), lambda: self._create_instance(cls))

    def _resolve_registered(self, identifier: ServiceIdentifier) -> Any:
        key = service_key(identifier)
        if key in self._instances:
            return self._instances[key]

        if key in self._aliases:
            target = self._aliases[key]
            if service_key(target) == key:
                return _MISSING
            instance = self._resolve_registered(target)
            if instance is _MISSING and self.is_autowirable(target):
                instance = self._autowire(target)  # type: ignore[arg-type]
            return instance

        factory = self._factories.get(key)
        if factory is None:
            return _MISSING

        instance = self._build(key, factory)
        if factory not in self._transient:
            self._instances[key] = instance
        return instance

    def _autowire(self, cls: type) -> Any:
        key = service_key(cls)
        instance = self._build(key, lambda: self._create_instance(cls))
        self._instances[key] = instance
        return instance

    def _build(self, key: str, factory: ServiceFactory) -> Any:
        if key in self._resolving:
            raise CircularDependencyError(chain=list(self._resolving.keys()), current=key)
        self._resolving[key] = None
        try:
            return factory()
        finally:
            self._resolving.pop(key, None)

    @staticmethod
    def is_autowirable(identifier: ServiceIdentifier) -> bool:
        """Whether *identifier* is a concrete class the container may construct itself."""
        if not isinstance(identifier, type):
            return False
        if identifier.__module__ == "builtins":
            return False
        if getattr(identifier, "_is_protocol", False):
            return False
        return not inspect.isabstract(identifier)

    def _create_instance(self, cls: type) -> Any:
        """Create an instance, resolving constructor dependencies."""
        init = cls.__init__  # type: ignore[misc]
        if init is object.__init__:
            return cls()

        hints = typing.get_type_hints(init)
        hints.pop("return", None)
        sig = inspect.signature(init)

        kwargs: dict[str, Any] = {}
        for param_name, param_type in hints.items():
            param = sig.parameters.get(param_name)
            has_default = param is not None and param.default is not inspect.Parameter.empty
            try:
                kwargs[param_name] = self._resolve_param(param_type)
            except ServiceNotFoundError:
                if has_default:
                    continue
                raise
        return cls(**kwargs)

    def _resolve_param(self, param_type: Any) -> Any:
        """Resolve a single constructor parameter, handling ``Optional[T]``."""
        if get_origin(param_type) is Union or isinstance(param_type, types.UnionType):
            args = get_args(param_type)
            non_none = [a for a in args if a is not type(None)]
            if len(non_none) == 1:
                try:
                    return self.get(non_none[0])
                except ServiceNotFoundError:
                    return None

        if not isinstance(param_type, (str, type)):
            raise ServiceNotFoundError(param_type, registry=self.name)

        return self.get(param_type)

    def _get_similar_names(self, key: str) -> list[str]:
        """Return registered keys similar to *key* using fuzzy matching."""
        if not key:
            return []
        return difflib.get_close_matches(key, self.keys(), n=5, cutoff=0.6)

    # ------------------------------------------------------------------
    # Administrative slot API
    # ------------------------------------------------------------------

    def export_slots(self) -> dict[str, Any]:
        """Return the live slot table. Callers must copy before mutating."""
        return {
            "factories": self._factories,
            "instances": self._instances,
            "transient": self._transient,
            "aliases": self._aliases,
        }

    def import_slots(self, slots: dict[str, Any]) -> None:
        """Replace the slot table with *slots* (as produced by :meth:`export_slots`)."""
        unknown = set(slots) - set(self.SLOT_NAMES)
        if unknown:
            raise ValueError(f"Unknown registry slots for '{self.name}': {sorted(unknown)}")
        for slot in self.SLOT_NAMES:
            if slot in slots:
                setattr(self, f"_{slot}", slots[slot])

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, services={len(self.keys())})"


class AppContainer(Container):
    """Per-module registry; anything it does not know is asked of its parent."""

    def __init__(self, app_name: str, parent: Container | None = None) -> None:
        super().__init__(name=app_name)
        self.app_name = app_name
        self._parent = parent
        self.register_instance("app_name", app_name)

    @property
    def parent(self) -> Container | None:
        return self._parent

    def has(self, identifier: ServiceIdentifier) -> bool:
        if super().has(identifier):
            return True
        return self._parent is not None and self._parent.has(identifier)

    def _resolve_registered(self, identifier: ServiceIdentifier) -> Any:
        instance = super()._resolve_registered(identifier)
        if instance is _MISSING and self._parent is not None:
            return self._parent._resolve_registered(identifier)
        return instance


class ServerContainer(Container):
    """The process-wide registry, owner of all per-module registries."""

    def __init__(self) -> None:
        super().__init__(name="server")
        self._app_containers: dict[str, AppContainer] = {}

    def register_app_container(
        self,
        app_name: str,
        container: AppContainer | None = None,
    ) -> AppContainer:
        """Attach a module registry, creating one parented to this registry if needed."""
        if container is None:
            container = AppContainer(app_name, parent=self)
        self._app_containers[app_name.lower()] = container
        return container

    def get_app_container(self, app_name: str) -> AppContainer | None:
        return self._app_containers.get(app_name.lower())

    @property
    def app_containers(self) -> dict[str, AppContainer]:
        """A copy of the module-name -> registry mapping."""
        return dict(self._app_containers)
