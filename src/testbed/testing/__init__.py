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
"""testbed testing: registry isolation, service overrides and test doubles."""

from testbed.testing.harness import HarnessSession
from testbed.testing.mock_provider import CLOUD_USER_UID, MockContainer, MockProvider
from testbed.testing.overrides import ServiceOverrideRegistry
from testbed.testing.snapshot import RegistrySnapshot, RegistrySnapshotStore

__all__ = [
    "CLOUD_USER_UID",
    "HarnessSession",
    "MockContainer",
    "MockProvider",
    "RegistrySnapshot",
    "RegistrySnapshotStore",
    "ServiceOverrideRegistry",
]
