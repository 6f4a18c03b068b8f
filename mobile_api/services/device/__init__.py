"""
Device Services

- identity.py - Load device.json (read-only)
- config_store.py - Atomic read/write/delete of config.json
"""

from .config_store import ConfigStore
from .identity import load_identity

__all__ = ["ConfigStore", "load_identity"]
