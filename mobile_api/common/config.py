"""
Device Data Models

Type-safe structures for the two files under the SIFIS-Home path:
- device.json: DeviceIdentity, written at the factory, read-only here
- config.json: DeviceConfig, written by the mobile application

Both files use kebab-case keys on disk and on the wire.
"""

from pathlib import Path
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints

from .security import HEX_KEY_PATTERN, SecurityKey

HexKey = Annotated[
    str,
    StringConstraints(pattern=HEX_KEY_PATTERN),
    AfterValidator(str.lower),
]


class DeviceIdentity(BaseModel):
    """
    Smart Device information (device.json).

    Pre-written at the factory by create-device-info. The authorization key is
    also delivered with the product as a QR code for the mobile application.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    product_name: str = Field(..., alias="product-name", min_length=1)
    uuid: UUID
    authorization_key: HexKey = Field(..., alias="authorization-key")
    private_key_file: Path = Field(..., alias="private-key-file")

    @property
    def security_key(self) -> SecurityKey:
        return SecurityKey.from_hex(self.authorization_key)

    def __repr__(self) -> str:
        return (
            f"DeviceIdentity(product_name={self.product_name!r}, uuid={self.uuid}, "
            f"private_key_file={str(self.private_key_file)!r})"
        )


class DeviceConfig(BaseModel):
    """Smart Device configuration (config.json), set by the device owner"""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name: str = Field(..., min_length=1, max_length=255, description="User-defined name for the device")
    dht_shared_key: HexKey = Field(
        ...,
        alias="dht-shared-key",
        description="Shared key for DHT communication, 32 bytes in hex format",
    )

    def to_json(self, pretty: bool = True) -> str:
        return self.model_dump_json(by_alias=True, indent=2 if pretty else None)

    def __repr__(self) -> str:
        return f"DeviceConfig(name={self.name!r}, dht_shared_key=<redacted>)"
