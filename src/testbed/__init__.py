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
"""testbed: integration test harness for applications hosted in a DI runtime.

Runs tests against a real, throwaway MariaDB server and the real service
graph of the host runtime, with selected services replaced by doubles and
the shared registries rolled back between test cases.
"""

__version__ = "0.1.0"
