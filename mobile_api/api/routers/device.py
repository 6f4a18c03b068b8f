"""
Device Router

Handles the device's own state:
- Host status (CPU, memory, disks, uptime, load)
- Read the configuration set by the mobile application
- Replace the configuration

All endpoints require the device API key (see middleware/auth.py).
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from mobile_api.common.config import DeviceConfig
from mobile_api.common.exceptions import ConfigNotFoundError
from mobile_api.services.commands.dispatcher import CommandKind

from ..errors import OkResponse
from ..state import DeviceState, get_device_state

router = APIRouter()


# ============================================
# SCHEMAS
# ============================================

class DiskStatusResponse(BaseModel):
    """Usage of one mounted filesystem."""
    device: str
    mount_point: str
    file_system: str
    total_bytes: int
    used_bytes: int
    available_bytes: int
    usage_percent: float


class DeviceStatusResponse(BaseModel):
    """Host status snapshot."""
    cpu_usage_percent: float = Field(..., description="Average CPU usage over all cores")
    cpu_usage_per_core: list[float]
    memory_total_bytes: int
    memory_used_bytes: int
    memory_available_bytes: int
    swap_total_bytes: int | None = Field(None, description="Null when the host has no swap")
    swap_used_bytes: int | None = None
    disk_total_bytes: int = Field(..., description="Size of the filesystem holding disk_path")
    disk_used_bytes: int
    disks: list[DiskStatusResponse] = []
    uptime_seconds: int
    load_average_1: float
    load_average_5: float
    load_average_15: float
    timestamp: str


# ============================================
# ENDPOINTS
# ============================================

@router.get("/status", response_model=DeviceStatusResponse)
def get_status(state: DeviceState = Depends(get_device_state)):
    """
    Get a snapshot of the host's resource usage.

    Returns 503 if the host cannot be sampled within the status timeout, and
    500 if the host refuses a query.
    """
    metrics = state.metrics.snapshot()
    return DeviceStatusResponse(**metrics.to_dict())


@router.get("/configuration", response_model=DeviceConfig)
def get_configuration(state: DeviceState = Depends(get_device_state)):
    """
    Get the current device configuration.

    Returns 404 while the device is unprovisioned.
    """
    config = state.config_store.read()
    if config is None:
        raise ConfigNotFoundError()
    return config


@router.put("/configuration", response_model=OkResponse)
def set_configuration(
    config: DeviceConfig,
    state: DeviceState = Depends(get_device_state),
):
    """
    Replace the device configuration.

    The whole document is replaced; there is no partial update. Returns 409
    while a factory reset is running, since the reset would remove it.
    """
    with state.dispatcher.hold(CommandKind.FACTORY_RESET):
        state.config_store.write(config)
    return OkResponse(message="Configuration saved.")
