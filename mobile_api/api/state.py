"""
Application State

Everything the request handlers share lives in one DeviceState object:
- Created once in create_app() and stored on app.state
- Never torn down except for the metrics worker on shutdown
- Handed to routes with Depends(get_device_state)
"""

from dataclasses import dataclass

from fastapi import Request

from mobile_api.common.config import DeviceIdentity
from mobile_api.common.settings import Settings
from mobile_api.services.auth.guard import AuthGuard
from mobile_api.services.commands.dispatcher import CommandDispatcher
from mobile_api.services.device.config_store import ConfigStore
from mobile_api.services.system.metrics_collector import MetricsCollector


@dataclass
class DeviceState:
    """Process-wide state injected into handlers"""
    settings: Settings
    identity: DeviceIdentity
    guard: AuthGuard
    config_store: ConfigStore
    metrics: MetricsCollector
    dispatcher: CommandDispatcher


def get_device_state(request: Request) -> DeviceState:
    """FastAPI dependency returning the shared DeviceState"""
    return request.app.state.device
