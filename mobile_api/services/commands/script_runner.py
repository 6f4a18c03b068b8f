"""
Script Runner

Runs one command script as a child process. The argument vector is just the
fixed script path: no shell, no user input.

The script runs in its own session so a timeout can kill everything it
started (e.g. a `sleep` inside a shell script), not just the shell.

Completion means the script itself exited. Children it left running in the
background (a delayed reboot, for example) keep running, so output goes to
temporary files rather than pipes that such children would hold open.
"""

import os
import signal
import subprocess
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from mobile_api.common.exceptions import ExecutionError
from mobile_api.common.logging_setup import get_service_logger

logger = get_service_logger("commands.runner")

# Time allowed for the killed script to be reaped
KILL_GRACE_SECONDS = 5.0


@dataclass
class ScriptResult:
    """What happened when a script was run"""
    exit_status: int
    duration_ms: int
    timed_out: bool
    stdout: str = ""
    stderr: str = ""


class ScriptRunner:
    """Spawns scripts and enforces a wall-clock timeout"""

    def run(self, script: Path, timeout: float) -> ScriptResult:
        """
        Run script and wait for it at most timeout seconds.

        Args:
            script: Absolute path of an executable file
            timeout: Seconds before the process group is killed

        Returns:
            Exit status, duration and captured output. A non-zero exit or a
            timeout is reported here, not raised.

        Raises:
            ExecutionError: If the script could not be started
        """
        with tempfile.TemporaryFile() as stdout_file, tempfile.TemporaryFile() as stderr_file:
            started = time.monotonic()
            try:
                process = subprocess.Popen(
                    [str(script)],
                    stdin=subprocess.DEVNULL,
                    stdout=stdout_file,
                    stderr=stderr_file,
                    cwd=str(script.parent),
                    start_new_session=True,
                )
            except FileNotFoundError as e:
                raise ExecutionError(f"Script not found: {script}") from e
            except PermissionError as e:
                raise ExecutionError(f"Script is not executable: {script}") from e
            except OSError as e:
                raise ExecutionError(f"Could not start {script}: {e}") from e

            timed_out = False
            try:
                process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                timed_out = True
                logger.warning(f"{script.name} exceeded {timeout}s, killing it")
                self._kill_group(process)
                self._reap(process)
            except BaseException:
                self._kill_group(process)
                self._reap(process)
                raise

            duration_ms = int((time.monotonic() - started) * 1000)

            return ScriptResult(
                exit_status=process.returncode if process.returncode is not None else -signal.SIGKILL,
                duration_ms=duration_ms,
                timed_out=timed_out,
                stdout=self._read_output(stdout_file),
                stderr=self._read_output(stderr_file),
            )

    @staticmethod
    def _kill_group(process: subprocess.Popen) -> None:
        """SIGKILL the script and everything in its session"""
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        except PermissionError:
            process.kill()

    @staticmethod
    def _reap(process: subprocess.Popen) -> None:
        try:
            process.wait(timeout=KILL_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            logger.error(f"Process {process.pid} did not exit after SIGKILL")

    @staticmethod
    def _read_output(output: IO[bytes]) -> str:
        output.seek(0)
        return output.read().decode("utf-8", errors="replace")
