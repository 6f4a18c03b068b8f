"""
Commands Router

Runs the device's system scripts on request of the mobile application:
- factory_reset - Run factory_reset.sh, then remove config.json
- restart - Run restart.sh
- shutdown - Run shutdown.sh

A script that exits non-zero or times out is still a 200: the outcome says
what happened. 409 means the same command is already running, 500 means the
script could not be started at all.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from mobile_api.services.commands.dispatcher import CommandKind, CommandOutcome

from ..state import DeviceState, get_device_state

router = APIRouter()

FACTORY_RESET_CONFIRMATION = "I really want to perform a factory reset"


# ============================================
# SCHEMAS
# ============================================

class CommandOutcomeResponse(BaseModel):
    """Result of a command."""
    command: CommandKind
    exit_status: int
    duration_ms: int
    timed_out: bool
    succeeded: bool
    config_removed: bool
    message: str


# ============================================
# HELPER FUNCTIONS
# ============================================

def outcome_to_response(outcome: CommandOutcome) -> CommandOutcomeResponse:
    """Convert a dispatcher outcome to the response model."""
    return CommandOutcomeResponse(
        command=outcome.command,
        exit_status=outcome.exit_status,
        duration_ms=outcome.duration_ms,
        timed_out=outcome.timed_out,
        succeeded=outcome.succeeded,
        config_removed=outcome.config_removed,
        message=outcome.message,
    )


# ============================================
# ENDPOINTS
# ============================================

@router.get("/factory_reset", response_model=CommandOutcomeResponse)
def factory_reset(
    confirm: str | None = Query(None, description="Confirmation phrase, when required"),
    state: DeviceState = Depends(get_device_state),
):
    """
    Reset the device to factory state.

    When factory_reset_confirmation is enabled the request must carry
    ?confirm=I really want to perform a factory reset
    """
    if state.settings.factory_reset_confirmation and confirm != FACTORY_RESET_CONFIRMATION:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Factory reset must be confirmed with confirm={FACTORY_RESET_CONFIRMATION!r}",
        )
    return outcome_to_response(state.dispatcher.dispatch(CommandKind.FACTORY_RESET))


@router.get("/restart", response_model=CommandOutcomeResponse)
def restart(state: DeviceState = Depends(get_device_state)):
    """
    Restart the device.

    The API keeps serving after restart.sh returns. Stopping this process is
    left to the script and the init system, so a script that only schedules
    the reboot still gets its reply out.
    """
    return outcome_to_response(state.dispatcher.dispatch(CommandKind.RESTART))


@router.get("/shutdown", response_model=CommandOutcomeResponse)
def shutdown(state: DeviceState = Depends(get_device_state)):
    """
    Power off the device.

    As with restart, the API keeps serving until shutdown.sh or the init
    system stops it.
    """
    return outcome_to_response(state.dispatcher.dispatch(CommandKind.SHUTDOWN))
