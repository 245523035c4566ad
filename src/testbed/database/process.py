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
"""Run and supervise external processes."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from dataclasses import dataclass

from testbed.kernel.exceptions import ProcessFailedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of a synchronously run command."""

    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner:
    """Thin wrapper over :mod:`subprocess` with captured output."""

    def run(self, args: list[str], input: str | None = None, check: bool = True) -> ProcessResult:
        """Run *args* to completion, feeding *input* on stdin.

        Raises:
            ProcessFailedError: *check* is set and the command exited non-zero.
        """
        logger.debug("Running %s", args[0])
        completed = subprocess.run(
            args,
            input=input,
            capture_output=True,
            text=True,
            check=False,
        )
        result = ProcessResult(
            args=list(args),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
        if check and not result.ok:
            raise ProcessFailedError(result.args, result.returncode, result.stderr)
        return result

    def start(self, args: list[str]) -> subprocess.Popen:
        """Launch *args* in its own process group without waiting for it."""
        logger.debug("Starting %s", args[0])
        return subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            start_new_session=True,
        )

    def kill(self, process: subprocess.Popen) -> None:
        """SIGKILL *process* and its process group, then reap it."""
        if process.poll() is None:
            try:
                os.killpg(process.pid, signal.SIGKILL)
            except ProcessLookupError:
                pass
        process.wait()
        if process.stderr is not None:
            process.stderr.close()

    def error_output(self, process: subprocess.Popen) -> str:
        """Whatever *process* has written to stderr so far.

        The pipe is switched to non-blocking mode, so a process that is
        still running yields what is buffered instead of stalling the
        caller. Output that has been read once is not returned again.
        """
        if process.stderr is None or process.stderr.closed:
            return ""
        os.set_blocking(process.stderr.fileno(), False)
        data = process.stderr.read()
        return data.decode(errors="replace") if data else ""

    @staticmethod
    def kill_pid(pid: int) -> bool:
        """SIGKILL an OS process by id. Returns ``False`` if it was already gone."""
        try:
            os.kill(pid, signal.SIGKILL)
        except ProcessLookupError:
            return False
        return True
