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
"""Object-identity indexed set."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any


class IdentitySet:
    """A set whose membership is decided by object identity, not equality.

    Members need not be hashable. The set keeps strong references to its
    members. ``IdentitySet(other)`` builds a new container holding the very
    same member objects, which is what registry snapshots rely on.
    """

    __slots__ = ("_members",)

    def __init__(self, members: Iterable[Any] = ()) -> None:
        self._members: dict[int, Any] = {}
        for member in members:
            self.add(member)

    def add(self, member: Any) -> None:
        self._members[id(member)] = member

    def discard(self, member: Any) -> None:
        self._members.pop(id(member), None)

    def update(self, members: Iterable[Any]) -> None:
        for member in members:
            self.add(member)

    def __contains__(self, member: object) -> bool:
        return id(member) in self._members and self._members[id(member)] is member

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._members.values()))

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        return f"IdentitySet({list(self._members.values())!r})"
