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
"""Harness configuration properties: the module under test and its artifacts."""

from __future__ import annotations

from dataclasses import dataclass

from testbed.core.config import config_properties


@config_properties(prefix="testbed.harness")
@dataclass
class HarnessProperties:
    """Configuration for the mock provider and test artifacts (testbed.harness.*)."""

    app_name: str = "testapp"
    app_namespace: str = "apps.testapp"
    apps_root: str = "apps"
    artifacts_dir: str = "build/artifacts"
    l10n_dir: str = "l10n"
    language: str = "de"
