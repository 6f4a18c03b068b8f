"""
API Key Guard

Checks the key presented by the mobile application against the
authorization key from device.json. The key is the only access control,
so the check takes the same path for missing, malformed and wrong keys.
"""

from mobile_api.common.config import DeviceIdentity
from mobile_api.common.exceptions import KeyFormatError
from mobile_api.common.security import KEY_SIZE, SecurityKey

# Compared against when the presented key cannot be parsed
_DUMMY_KEY = SecurityKey(bytes(KEY_SIZE))


class AuthGuard:
    """Validates presented API keys"""

    def __init__(self, identity: DeviceIdentity):
        self._expected = identity.security_key

    def authorize(self, presented: str | None) -> bool:
        """
        Check a presented key.

        Args:
            presented: Key as hex or base64, or None if the request had none

        Returns:
            True if the key matches the device authorization key
        """
        candidate = _DUMMY_KEY
        parsed = False
        if presented:
            try:
                candidate = SecurityKey.from_string(presented)
                parsed = True
            except KeyFormatError:
                pass

        matches = self._expected.matches(candidate)
        return parsed and matches
