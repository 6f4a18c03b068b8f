"""
Custom Exception Classes for the Mobile API

Hierarchical exception structure shared by the services and the HTTP layer.
The HTTP layer maps each class to a status code in api/errors.py.
"""


class MobileApiError(Exception):
    """Base exception for all Mobile API errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class StartupError(MobileApiError):
    """Service cannot start (missing or invalid device.json, bad settings)"""

    def __init__(self, message: str):
        super().__init__(message, recoverable=False)


class KeyFormatError(MobileApiError):
    """Security key is not 64 hex characters or base64 of 32 bytes"""

    def __init__(self, message: str = "key data length is incorrect"):
        super().__init__(message)


class UnauthorizedError(MobileApiError):
    """Missing or wrong API key"""

    def __init__(self):
        super().__init__("The request requires user authentication.")


class ConfigNotFoundError(MobileApiError):
    """Device has no config.json yet"""

    def __init__(self):
        super().__init__("This device has not been configured yet.")


class PersistError(MobileApiError):
    """Reading, writing or deleting a state file failed"""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"Persist Error: {message}")


class ExecutionError(MobileApiError):
    """Command script could not be started"""

    def __init__(self, message: str, command: str | None = None):
        self.command = command
        super().__init__(f"Execution Error: {message}")


class CommandBusyError(MobileApiError):
    """The same command is already running"""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Command '{command}' is already running.")


class StatusTimeoutError(MobileApiError):
    """Host metrics sampling did not finish in time"""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"System status could not be sampled within {timeout_seconds:g} seconds."
        )


class StatusUnavailableError(MobileApiError):
    """The host refused a metrics query"""

    def __init__(self, message: str):
        super().__init__(f"System status is unavailable: {message}")
