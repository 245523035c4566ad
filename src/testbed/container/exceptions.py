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
"""Container exceptions: resolution failures surfaced to the caller."""

from __future__ import annotations

from typing import Any

from testbed.kernel.exceptions import ResolutionException


class ServiceNotFoundError(ResolutionException):
    """No factory, cached instance, original or double exists for a service."""

    def __init__(
        self,
        identifier: Any,
        *,
        registry: str | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        self.identifier = identifier
        self.registry = registry
        self.suggestions = suggestions or []

        name = identifier if isinstance(identifier, str) else getattr(identifier, "__qualname__", repr(identifier))
        headline = f"{name} NOT FOUND"

        lines = [f"ServiceNotFoundError: {headline}"]
        if registry:
            lines.append(f"  Registry: {registry}")
        if self.suggestions:
            lines.append("")
            lines.append(f"  Similar registered services: {', '.join(self.suggestions)}")

        super().__init__(
            "\n".join(lines),
            code="SERVICE_NOT_FOUND",
            context={"identifier": name, "registry": registry},
        )


class CircularDependencyError(ResolutionException):
    """Circular dependency detected while building a service.

    The ``chain`` attribute contains the resolution path as a deterministic
    ordered list of service keys.
    """

    def __init__(self, *, chain: list[str], current: str) -> None:
        self.chain = chain
        self.current = current

        chain_str = " -> ".join([*chain, current])
        lines = [f"CircularDependencyError: Circular dependency: {chain_str}"]
        lines.append("")
        lines.append("  Suggestion: Break the cycle with a factory that resolves lazily")

        super().__init__("\n".join(lines), code="CIRCULAR_DEPENDENCY", context={"chain": [*chain, current]})
