"""
Middleware

- auth.py - API key check for the device and command routes
"""

from .auth import ApiKeyMiddleware

__all__ = ["ApiKeyMiddleware"]
