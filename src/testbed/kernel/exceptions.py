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
"""Unified exception hierarchy for testbed.

All harness exceptions inherit from TestbedException so a test session can
catch a single root type around its setup code.

Categories:
- InfrastructureException: the ephemeral database server and the OS
  processes around it. These are fatal for the test run; nothing retries.
- ResolutionException: a service identifier could not be resolved by any
  of the registries or test doubles.
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class TestbedException(Exception):
    """Base exception for all testbed errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "DATABASE_STARTUP").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    # Keep pytest from collecting the exception classes as test classes.
    __test__ = False

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(TestbedException):
    """Infrastructure failures: database server, OS processes, filesystem."""


class ExecutableNotFoundError(InfrastructureException):
    """A required external tool could not be located."""

    def __init__(self, tool: str, searched: list[str] | None = None) -> None:
        self.tool = tool
        self.searched = searched or []
        message = f"Required executable '{tool}' was not found"
        if self.searched:
            message += f" (searched: {', '.join(self.searched)})"
        super().__init__(
            message,
            code="EXECUTABLE_NOT_FOUND",
            context={"tool": tool, "searched": self.searched},
        )


class ProcessFailedError(InfrastructureException):
    """An external tool exited with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, stderr: str = "") -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command '{self.command[0] if self.command else '?'}' exited with status {returncode}"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(
            message,
            code="PROCESS_FAILED",
            context={"command": self.command, "returncode": returncode},
        )


class DatabaseStartupError(InfrastructureException):
    """The ephemeral database server could not be brought up.

    ``log_tail`` holds whatever the server wrote to its error log before the
    harness gave up; it is also embedded in the message.
    """

    def __init__(self, reason: str, log_tail: str = "") -> None:
        self.reason = reason
        self.log_tail = log_tail
        message = reason if not log_tail else f"{reason}: {log_tail}"
        super().__init__(message, code="DATABASE_STARTUP", context={"reason": reason})


class DatabaseNotRunningError(InfrastructureException):
    """An operation needs a running database server but none is tracked."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Cannot {operation}: no database server is running",
            code="DATABASE_NOT_RUNNING",
            context={"operation": operation},
        )


# =============================================================================
# Resolution Exceptions
# =============================================================================


class ResolutionException(TestbedException):
    """A service could not be produced by any registry or double."""
