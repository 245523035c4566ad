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
"""testbed host registry: the service container the harness patches."""

from testbed.container.container import AppContainer, Container, ServerContainer
from testbed.container.exceptions import CircularDependencyError, ServiceNotFoundError
from testbed.container.identity import IdentitySet
from testbed.container.types import Scope, ServiceFactory, ServiceIdentifier, service_key

__all__ = [
    "AppContainer",
    "CircularDependencyError",
    "Container",
    "IdentitySet",
    "Scope",
    "ServerContainer",
    "ServiceFactory",
    "ServiceIdentifier",
    "ServiceNotFoundError",
    "service_key",
]
