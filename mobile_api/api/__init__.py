"""
HTTP API

- main.py - create_app() and service wiring
- state.py - DeviceState shared by the handlers
- errors.py - Error envelope and exception handlers
- middleware/ - API key check
- routers/ - Device and command endpoints
"""

from .main import create_app

__all__ = ["create_app"]
