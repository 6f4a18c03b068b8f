"""
Tests for the command dispatcher

Uses a fake runner so no real scripts run, except where noted.
"""

import threading

import pytest

from mobile_api.common.config import DeviceConfig
from mobile_api.common.exceptions import CommandBusyError, ExecutionError
from mobile_api.services.commands.dispatcher import CommandDispatcher, CommandKind
from mobile_api.services.commands.script_runner import ScriptResult
from mobile_api.services.device.config_store import ConfigStore

from tests.conftest import VALID_CONFIG, make_script


class FakeRunner:
    """Returns a fixed result and records which scripts were run."""

    def __init__(self, exit_status: int = 0, timed_out: bool = False):
        self.exit_status = exit_status
        self.timed_out = timed_out
        self.calls = []

    def run(self, script, timeout):
        self.calls.append((script, timeout))
        return ScriptResult(exit_status=self.exit_status, duration_ms=12, timed_out=self.timed_out)


class BlockingRunner:
    """Holds every run until release is set."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()

    def run(self, script, timeout):
        self.started.set()
        self.release.wait(timeout=10)
        return ScriptResult(exit_status=0, duration_ms=1, timed_out=False)


class FailingRunner:
    def run(self, script, timeout):
        raise ExecutionError(f"Script not found: {script}")


@pytest.fixture
def store(tmp_path) -> ConfigStore:
    store = ConfigStore(tmp_path / "config.json")
    store.write(DeviceConfig.model_validate(VALID_CONFIG))
    return store


def make_dispatcher(tmp_path, store, runner) -> CommandDispatcher:
    return CommandDispatcher(tmp_path / "scripts", store, runner=runner, timeout_seconds=7)


# ============================================
# SCRIPT SELECTION
# ============================================

@pytest.mark.parametrize("command, script", [
    (CommandKind.FACTORY_RESET, "factory_reset.sh"),
    (CommandKind.RESTART, "restart.sh"),
    (CommandKind.SHUTDOWN, "shutdown.sh"),
])
def test_runs_fixed_script(tmp_path, store, command, script):
    runner = FakeRunner()
    dispatcher = make_dispatcher(tmp_path, store, runner)

    dispatcher.dispatch(command)

    assert runner.calls == [((tmp_path / "scripts" / script).absolute(), 7)]


def test_accepts_command_value(tmp_path, store):
    runner = FakeRunner()
    outcome = make_dispatcher(tmp_path, store, runner).dispatch("restart")
    assert outcome.command is CommandKind.RESTART


def test_unknown_command_is_rejected(tmp_path, store):
    with pytest.raises(ValueError):
        make_dispatcher(tmp_path, store, FakeRunner()).dispatch("../../bin/sh")


# ============================================
# OUTCOMES
# ============================================

def test_factory_reset_success_removes_config(tmp_path, store):
    outcome = make_dispatcher(tmp_path, store, FakeRunner()).dispatch(CommandKind.FACTORY_RESET)

    assert outcome.succeeded
    assert outcome.config_removed
    assert outcome.message == "Factory reset complete."
    assert store.read() is None


def test_factory_reset_failure_keeps_config(tmp_path, store):
    outcome = make_dispatcher(tmp_path, store, FakeRunner(exit_status=2)).dispatch(
        CommandKind.FACTORY_RESET
    )

    assert not outcome.succeeded
    assert not outcome.config_removed
    assert outcome.exit_status == 2
    assert "status 2" in outcome.message
    assert store.read() is not None


def test_factory_reset_timeout_keeps_config(tmp_path, store):
    runner = FakeRunner(exit_status=-9, timed_out=True)
    outcome = make_dispatcher(tmp_path, store, runner).dispatch(CommandKind.FACTORY_RESET)

    assert outcome.timed_out
    assert not outcome.succeeded
    assert "did not finish" in outcome.message
    assert store.exists()


def test_factory_reset_when_unprovisioned(tmp_path):
    store = ConfigStore(tmp_path / "config.json")
    outcome = make_dispatcher(tmp_path, store, FakeRunner()).dispatch(CommandKind.FACTORY_RESET)
    assert outcome.succeeded
    assert outcome.config_removed


@pytest.mark.parametrize("command, message", [
    (CommandKind.RESTART, "System will now restart."),
    (CommandKind.SHUTDOWN, "System will now power off."),
])
def test_power_commands_keep_config(tmp_path, store, command, message):
    outcome = make_dispatcher(tmp_path, store, FakeRunner()).dispatch(command)

    assert outcome.succeeded
    assert outcome.message == message
    assert not outcome.config_removed
    assert store.exists()


def test_execution_error_propagates_and_releases(tmp_path, store):
    dispatcher = make_dispatcher(tmp_path, store, FailingRunner())

    with pytest.raises(ExecutionError) as exc_info:
        dispatcher.dispatch(CommandKind.RESTART)
    assert exc_info.value.command == "restart"

    # The command is not left marked as running
    dispatcher.runner = FakeRunner()
    assert dispatcher.dispatch(CommandKind.RESTART).succeeded
    assert store.exists()


# ============================================
# CONCURRENCY
# ============================================

def test_same_command_is_rejected_while_running(tmp_path, store):
    runner = BlockingRunner()
    dispatcher = make_dispatcher(tmp_path, store, runner)

    first = threading.Thread(target=dispatcher.dispatch, args=(CommandKind.RESTART,))
    first.start()
    try:
        assert runner.started.wait(timeout=5)
        with pytest.raises(CommandBusyError):
            dispatcher.dispatch(CommandKind.RESTART)
    finally:
        runner.release.set()
        first.join(timeout=5)

    assert dispatcher.dispatch(CommandKind.RESTART).succeeded


def test_different_commands_run_in_parallel(tmp_path, store):
    runner = BlockingRunner()
    dispatcher = make_dispatcher(tmp_path, store, runner)

    first = threading.Thread(target=dispatcher.dispatch, args=(CommandKind.RESTART,))
    first.start()
    try:
        assert runner.started.wait(timeout=5)
        dispatcher.runner = FakeRunner()
        assert dispatcher.dispatch(CommandKind.SHUTDOWN).succeeded
    finally:
        runner.release.set()
        first.join(timeout=5)


# ============================================
# REAL SCRIPTS
# ============================================

def test_dispatch_with_real_script(store, scripts_path):
    dispatcher = CommandDispatcher(scripts_path, store, timeout_seconds=5)

    outcome = dispatcher.dispatch(CommandKind.SHUTDOWN)

    assert outcome.succeeded
    assert (scripts_path / "shutdown.sh.ran").exists()


def test_factory_reset_with_detached_child_removes_config(store, scripts_path):
    make_script(scripts_path, "factory_reset.sh", "(sleep 3) &\nexit 0")
    dispatcher = CommandDispatcher(scripts_path, store, timeout_seconds=2)

    outcome = dispatcher.dispatch(CommandKind.FACTORY_RESET)

    assert not outcome.timed_out
    assert outcome.succeeded
    assert outcome.config_removed
    assert store.read() is None


# ============================================
# HOLDING A COMMAND
# ============================================

def test_hold_fails_while_command_runs(tmp_path, store):
    runner = BlockingRunner()
    dispatcher = make_dispatcher(tmp_path, store, runner)

    reset = threading.Thread(target=dispatcher.dispatch, args=(CommandKind.FACTORY_RESET,))
    reset.start()
    try:
        assert runner.started.wait(timeout=5)
        with pytest.raises(CommandBusyError):
            with dispatcher.hold(CommandKind.FACTORY_RESET):
                pass
        with dispatcher.hold(CommandKind.RESTART):
            pass
    finally:
        runner.release.set()
        reset.join(timeout=5)


def test_command_cannot_start_while_held(tmp_path, store):
    dispatcher = make_dispatcher(tmp_path, store, FakeRunner())

    with dispatcher.hold(CommandKind.FACTORY_RESET):
        with pytest.raises(CommandBusyError):
            dispatcher.dispatch(CommandKind.FACTORY_RESET)

    assert dispatcher.dispatch(CommandKind.FACTORY_RESET).succeeded
