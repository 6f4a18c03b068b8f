"""
Smart Device Mobile API - HTTP Application

FastAPI application that provides:
- Device status (CPU, memory, disks, uptime, load)
- Device configuration (read and replace)
- Commands (factory reset, restart, shutdown)

Every /device and /command route requires the device's API key from
device.json. The identity is loaded when the app is created, so a device
without a valid device.json never starts serving.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from mobile_api import __version__
from mobile_api.common.logging_setup import get_service_logger
from mobile_api.common.settings import Settings
from mobile_api.services.auth.guard import AuthGuard
from mobile_api.services.commands.dispatcher import CommandDispatcher
from mobile_api.services.commands.script_runner import ScriptRunner
from mobile_api.services.device.config_store import ConfigStore
from mobile_api.services.device.identity import load_identity
from mobile_api.services.system.metrics_collector import MetricsCollector

from .errors import register_error_handlers
from .middleware.auth import ApiKeyMiddleware
from .routers import commands, device
from .state import DeviceState

logger = get_service_logger("api")


# ============================================
# APPLICATION STATE
# ============================================

def build_device_state(settings: Settings, runner: ScriptRunner | None = None) -> DeviceState:
    """
    Load the identity and wire up the services.

    Raises:
        StartupError: If device.json is missing or invalid
    """
    identity = load_identity(settings.device_info_path)
    config_store = ConfigStore(settings.device_config_path, file_mode=settings.config_file_mode)

    return DeviceState(
        settings=settings,
        identity=identity,
        guard=AuthGuard(identity),
        config_store=config_store,
        metrics=MetricsCollector(
            disk_path=settings.disk_path,
            timeout_seconds=settings.status_timeout_seconds,
        ),
        dispatcher=CommandDispatcher(
            scripts_dir=settings.resolved_scripts_path,
            config_store=config_store,
            runner=runner,
            timeout_seconds=settings.script_timeout_seconds,
        ),
    )


# ============================================
# APPLICATION LIFESPAN
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application startup and shutdown events.

    Startup:
    - Log the identity and provisioning state

    Shutdown:
    - Stop the metrics worker thread
    """
    state: DeviceState = app.state.device
    logger.info(
        f"Serving {state.identity.product_name} ({state.identity.uuid})",
        extra={
            "provisioned": state.config_store.exists(),
            "scripts_path": str(state.dispatcher.scripts_dir),
            "api_prefix": state.settings.api_prefix,
        },
    )

    yield

    logger.info("Shutting down API...")
    state.metrics.close()


# ============================================
# CREATE APPLICATION
# ============================================

def create_app(settings: Settings | None = None, runner: ScriptRunner | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Service settings (read from the environment if omitted)
        runner: Script runner override, mainly for tests

    Raises:
        StartupError: If the device identity cannot be loaded
    """
    settings = settings or Settings()
    state = build_device_state(settings, runner)
    prefix = settings.api_prefix

    app = FastAPI(
        title="Smart Device Mobile API",
        description="Provisioning and control API for the SIFIS-Home mobile application.",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.device = state

    register_error_handlers(app)

    app.add_middleware(
        ApiKeyMiddleware,
        guard=state.guard,
        guarded_prefixes=[f"{prefix}/device", f"{prefix}/command"],
    )

    app.include_router(
        device.router,
        prefix=f"{prefix}/device",
        tags=["Device"],
    )

    app.include_router(
        commands.router,
        prefix=f"{prefix}/command",
        tags=["Commands"],
    )

    @app.get("/health", tags=["Health"])
    def health_check():
        """Liveness check; needs no key and touches no device state."""
        return {"status": "healthy", "version": __version__}

    return app
