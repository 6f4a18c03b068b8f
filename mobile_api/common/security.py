"""
Security Primitives

- SecurityKey: 256-bit key used as the API authorization key and as the
  DHT shared key. Parsed from hex or base64, compared in constant time.
- generate_uuid7: time-ordered device identifiers for new device.json files.
"""

import base64
import binascii
import hmac
import re
import secrets
import time
import uuid

from .exceptions import KeyFormatError

KEY_SIZE = 32
HEX_KEY_PATTERN = r"^[0-9a-fA-F]{64}$"

_HEX_KEY_RE = re.compile(HEX_KEY_PATTERN)


class SecurityKey:
    """
    256-bit security key.

    The mobile application reads the authorization key from the QR code printed
    for the product and may send it either as a hex string or in base64.
    """

    __slots__ = ("_bytes",)

    def __init__(self, key_bytes: bytes):
        if len(key_bytes) != KEY_SIZE:
            raise KeyFormatError()
        self._bytes = bytes(key_bytes)

    @classmethod
    def generate(cls) -> "SecurityKey":
        """Create a new random key"""
        return cls(secrets.token_bytes(KEY_SIZE))

    @classmethod
    def from_hex(cls, text: str) -> "SecurityKey":
        """Parse 64 hex characters (either case)"""
        if not _HEX_KEY_RE.match(text):
            raise KeyFormatError()
        return cls(bytes.fromhex(text))

    @classmethod
    def from_base64(cls, text: str) -> "SecurityKey":
        """Parse standard base64 of exactly 32 bytes"""
        try:
            decoded = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise KeyFormatError(f"invalid base64 key: {e}") from e
        return cls(decoded)

    @classmethod
    def from_string(cls, text: str) -> "SecurityKey":
        """
        Parse a key given as hex or base64.

        Args:
            text: 64 hex characters, or 44 base64 characters

        Raises:
            KeyFormatError: If the text is neither
        """
        text = text.strip()
        if len(text) == KEY_SIZE * 2:
            return cls.from_hex(text)
        return cls.from_base64(text)

    def as_bytes(self) -> bytes:
        return self._bytes

    def hex(self, upper: bool = False) -> str:
        value = self._bytes.hex()
        return value.upper() if upper else value

    def is_null(self) -> bool:
        """True when every byte is zero"""
        return not any(self._bytes)

    def matches(self, other: "SecurityKey") -> bool:
        """Constant-time comparison"""
        return hmac.compare_digest(self._bytes, other._bytes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecurityKey):
            return NotImplemented
        return self.matches(other)

    def __hash__(self) -> int:
        return hash(self._bytes)

    def __repr__(self) -> str:
        # Never print the key itself
        return "SecurityKey(<redacted>)"

    def __str__(self) -> str:
        return self.hex()


def generate_uuid7() -> uuid.UUID:
    """
    Generate a version 7 UUID.

    Layout: 48-bit Unix timestamp in milliseconds, 4-bit version, 12 random
    bits, 2-bit variant, 62 random bits.
    """
    unix_ts_ms = time.time_ns() // 1_000_000
    value = (unix_ts_ms & 0xFFFF_FFFF_FFFF) << 80
    value |= int.from_bytes(secrets.token_bytes(10), "big")

    # Version 7 and RFC 4122 variant bits
    value &= ~(0xF000 << 64)
    value |= 0x7000 << 64
    value &= ~(0xC000 << 48)
    value |= 0x8000 << 48

    return uuid.UUID(int=value)
