"""MAC address text handling.

Addresses are carried around as plain ints in ``[0, 2**48)``.  The
accepted spellings are the ones people paste from tooling:

- ``AC:DE:48:00:00:01`` (colon separated octets)
- ``AC-DE-48-00-00-01`` (hyphen separated octets)
- ``acde.4800.0001`` (Cisco style dotted groups)
- ``ACDE48000001`` (bare hex)
"""
from __future__ import annotations

import re

from ouilookup.errors import AddressFormatError
from ouilookup.models import ADDRESS_BITS

_DELIMITERS = re.compile(r"[:\-.]")
_HEX_DIGITS = ADDRESS_BITS // 4
_HEX = re.compile(r"[0-9A-Fa-f]+")


def normalize_hex(text: str) -> str:
    """Strip recognised delimiters and upper-case the remaining digits.

    Non-ASCII text is returned without case folding, so characters such
    as U+FB00 never fold into hex digits.
    """
    digits = _DELIMITERS.sub("", text.strip())
    if not digits.isascii():
        return digits
    return digits.upper()


def parse_mac(text: str) -> int:
    if not isinstance(text, str):
        raise AddressFormatError(f"expected text, got {type(text).__name__}")
    digits = normalize_hex(text)
    if not digits:
        raise AddressFormatError("empty address")
    if not _HEX.fullmatch(digits):
        raise AddressFormatError(f"not hexadecimal: {text.strip()!r}")
    if len(digits) != _HEX_DIGITS:
        raise AddressFormatError(
            f"expected {_HEX_DIGITS} hex digits, got {len(digits)}: {text.strip()!r}"
        )
    return int(digits, 16)


def format_mac(address: int, sep: str = ":") -> str:
    if not 0 <= address < (1 << ADDRESS_BITS):
        raise ValueError(f"address out of range: {address!r}")
    digits = f"{address:012X}"
    return sep.join(digits[i:i + 2] for i in range(0, _HEX_DIGITS, 2))


def is_locally_administered(address: int) -> bool:
    """True when the U/L bit of the first octet is set."""
    first_octet = address >> (ADDRESS_BITS - 8)
    return bool(first_octet & 0x02)
