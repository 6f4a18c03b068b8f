"""
Command Dispatcher

Runs the factory reset, restart and shutdown scripts for the mobile
application.

Rules:
- Each command maps to a fixed script name; the request never builds a path
- The same command cannot run twice at once (CommandBusyError)
- Different commands may run in parallel
- A non-zero exit is a reportable outcome; failing to start is an error
- A successful factory reset removes config.json
- Configuration writes are refused while a factory reset runs
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from mobile_api.common.exceptions import CommandBusyError, ExecutionError
from mobile_api.common.logging_setup import get_service_logger
from mobile_api.services.device.config_store import ConfigStore

from .script_runner import ScriptResult, ScriptRunner

logger = get_service_logger("commands")


class CommandKind(str, Enum):
    """Commands the mobile application can give"""
    FACTORY_RESET = "factory_reset"
    RESTART = "restart"
    SHUTDOWN = "shutdown"


SCRIPT_NAMES: dict[CommandKind, str] = {
    CommandKind.FACTORY_RESET: "factory_reset.sh",
    CommandKind.RESTART: "restart.sh",
    CommandKind.SHUTDOWN: "shutdown.sh",
}

SUCCESS_MESSAGES: dict[CommandKind, str] = {
    CommandKind.FACTORY_RESET: "Factory reset complete.",
    CommandKind.RESTART: "System will now restart.",
    CommandKind.SHUTDOWN: "System will now power off.",
}


@dataclass
class CommandOutcome:
    """Result of one dispatched command"""
    command: CommandKind
    exit_status: int
    duration_ms: int
    timed_out: bool
    config_removed: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_status == 0 and not self.timed_out

    @property
    def message(self) -> str:
        if self.timed_out:
            return f"{SCRIPT_NAMES[self.command]} did not finish in time."
        if not self.succeeded:
            return f"{SCRIPT_NAMES[self.command]} exited with status {self.exit_status}."
        return SUCCESS_MESSAGES[self.command]


class CommandDispatcher:
    """
    Dispatches commands to their scripts.

    Scripts are looked up under scripts_dir when the dispatcher is built, so
    a later change to the directory contents is picked up but the set of
    possible paths is fixed.
    """

    def __init__(
        self,
        scripts_dir: Path,
        config_store: ConfigStore,
        runner: ScriptRunner | None = None,
        timeout_seconds: float = 30.0,
    ):
        self.scripts_dir = scripts_dir
        self.config_store = config_store
        self.runner = runner or ScriptRunner()
        self.timeout_seconds = timeout_seconds

        self._script_paths = {
            kind: (scripts_dir / name).absolute() for kind, name in SCRIPT_NAMES.items()
        }
        self._in_flight = {kind: threading.Lock() for kind in CommandKind}

    def script_path(self, command: CommandKind) -> Path:
        return self._script_paths[command]

    @contextmanager
    def hold(self, command: CommandKind):
        """
        Keep command from starting while the block runs.

        The configuration endpoint holds the factory reset this way, so a
        new configuration cannot be written and then wiped by a reset that
        was already running.

        Raises:
            CommandBusyError: If command is running now
        """
        command = CommandKind(command)
        lock = self._in_flight[command]
        if not lock.acquire(blocking=False):
            raise CommandBusyError(command.value)
        try:
            yield
        finally:
            lock.release()

    def dispatch(self, command: CommandKind) -> CommandOutcome:
        """
        Run the script for command and report the outcome.

        Raises:
            CommandBusyError: If the same command is already running
            ExecutionError: If the script could not be started
            PersistError: If a factory reset succeeded but config.json
                could not be removed
        """
        command = CommandKind(command)
        lock = self._in_flight[command]
        if not lock.acquire(blocking=False):
            logger.warning(f"Rejected {command.value}: already running")
            raise CommandBusyError(command.value)

        try:
            script = self._script_paths[command]
            logger.info(f"Running {script}", extra={"command": command.value})

            try:
                result = self.runner.run(script, self.timeout_seconds)
            except ExecutionError as e:
                e.command = command.value
                logger.error(f"Could not run {command.value}: {e.message}")
                raise

            self._log_output(command, result)

            outcome = CommandOutcome(
                command=command,
                exit_status=result.exit_status,
                duration_ms=result.duration_ms,
                timed_out=result.timed_out,
            )

            if command is CommandKind.FACTORY_RESET and outcome.succeeded:
                self.config_store.delete()
                outcome.config_removed = True

            log_method = logger.info if outcome.succeeded else logger.warning
            log_method(
                f"{command.value} finished: {outcome.message}",
                extra={
                    "command": command.value,
                    "exit_status": outcome.exit_status,
                    "duration_ms": outcome.duration_ms,
                    "timed_out": outcome.timed_out,
                },
            )
            return outcome
        finally:
            lock.release()

    @staticmethod
    def _log_output(command: CommandKind, result: ScriptResult) -> None:
        if result.stdout.strip():
            logger.debug(f"{command.value} stdout: {result.stdout.strip()}")
        if result.stderr.strip():
            logger.warning(f"{command.value} stderr: {result.stderr.strip()}")
