"""
Smart Device Mobile API

Local HTTP service that lets the SIFIS-Home mobile application provision a
Smart Device: read its status, set its configuration, and run power commands.
"""

__version__ = "1.0.0"
