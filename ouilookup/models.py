from __future__ import annotations

from typing import Annotated, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ADDRESS_BITS = 48
PREFIX_WIDTHS = (24, 28, 36)
BLOCK_NAMES = {24: "MA-L", 28: "MA-M", 36: "MA-S"}


class OuiRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    prefix_bits: int
    prefix_value: int
    organization: str
    registered_address: Optional[str] = None

    @field_validator("prefix_bits")
    @classmethod
    def _check_width(cls, value: int) -> int:
        if value not in PREFIX_WIDTHS:
            raise ValueError(f"prefix width must be one of {PREFIX_WIDTHS}, got {value}")
        return value

    @field_validator("organization")
    @classmethod
    def _check_organization(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("organization must not be empty")
        return value

    @field_validator("registered_address")
    @classmethod
    def _blank_address_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @model_validator(mode="after")
    def _check_value(self) -> "OuiRecord":
        if not 0 <= self.prefix_value < (1 << ADDRESS_BITS):
            raise ValueError("prefix_value must fit in 48 bits")
        host_bits = ADDRESS_BITS - self.prefix_bits
        if self.prefix_value & ((1 << host_bits) - 1):
            raise ValueError(f"prefix_value has bits set below the top {self.prefix_bits}")
        return self

    @property
    def prefix_hex(self) -> str:
        """Significant hex digits of the prefix, e.g. ``ACDE48``."""
        digits = self.prefix_bits // 4
        return f"{self.prefix_value >> (ADDRESS_BITS - self.prefix_bits):0{digits}X}"

    @property
    def block(self) -> str:
        return BLOCK_NAMES[self.prefix_bits]


class Resolved(BaseModel):
    status: Literal["resolved"] = "resolved"
    mac: str
    organization: str
    registered_address: Optional[str] = None
    matched_prefix_bits: int
    prefix: str


class Unresolved(BaseModel):
    status: Literal["unresolved"] = "unresolved"
    mac: str
    locally_administered: bool = False


class InvalidAddressFormat(BaseModel):
    status: Literal["invalid"] = "invalid"
    mac_text: str
    reason: str


LookupResult = Annotated[Union[Resolved, Unresolved, InvalidAddressFormat], Field(discriminator="status")]


class RegistryStats(BaseModel):
    source: Optional[str] = None
    total: int
    by_block: Dict[str, int] = Field(default_factory=dict)
