"""
Routers

- device.py - Status and configuration
- commands.py - Factory reset, restart and shutdown
"""

from . import commands, device

__all__ = ["commands", "device"]
