"""Parse registry table rows into :class:`OuiRecord` objects.

Two row shapes are understood.  The bundled table uses an implicit width,
where the number of hex digits in the prefix decides the block size::

    ACDE48;Example Corp;1 Example Way, Springfield

The IEEE download files lead with the registry name instead::

    MA-S,70B3D5F2F,Tiny Sensors GmbH,"Hauptstrasse 1, Berlin"
"""
from __future__ import annotations

import csv
import re
from typing import List, Optional

from pydantic import ValidationError

from ouilookup.errors import MalformedRecord
from ouilookup.mac import normalize_hex
from ouilookup.models import ADDRESS_BITS, OuiRecord

DEFAULT_DELIMITER = ";"

WIDTH_BY_DIGITS = {6: 24, 7: 28, 9: 36}
REGISTRY_WIDTHS = {"MA-L": 24, "MA-M": 28, "MA-S": 36, "IAB": 36}

_HEX = re.compile(r"[0-9A-F]+")


def detect_delimiter(line: str) -> str:
    if ";" in line:
        return ";"
    if "\t" in line:
        return "\t"
    return ","


def validate_delimiter(delimiter: Optional[str]) -> Optional[str]:
    """Return ``delimiter`` if the csv reader can use it."""
    if delimiter is not None and (not isinstance(delimiter, str) or len(delimiter) != 1):
        raise ValueError(f"delimiter must be a single character, got {delimiter!r}")
    return delimiter


def split_fields(line: str, delimiter: str = DEFAULT_DELIMITER) -> List[str]:
    try:
        rows = list(csv.reader([line.strip()], delimiter=delimiter, skipinitialspace=True))
    except csv.Error as exc:
        raise MalformedRecord(str(exc)) from exc
    if not rows:
        return []
    return [field.strip() for field in rows[0]]


def _looks_like_prefix(digits: str) -> bool:
    """A prefix-sized token made mostly of hex digits, e.g. ``ACDEXG``."""
    if len(digits) not in WIDTH_BY_DIGITS or any(ch.isspace() for ch in digits):
        return False
    hex_digits = sum(1 for ch in digits if ch in "0123456789ABCDEF")
    return hex_digits * 2 > len(digits)


def is_header(fields: List[str]) -> bool:
    """A header row is one whose leading field cannot start a record.

    A prefix-sized, mostly-hex leading field is a corrupt record rather
    than a header.
    """
    if not fields:
        return False
    head = fields[0].strip().upper()
    if head in REGISTRY_WIDTHS:
        return False
    digits = normalize_hex(head)
    if not digits or _HEX.fullmatch(digits):
        return False
    return not _looks_like_prefix(digits)


def parse_prefix(text: str, expected_bits: Optional[int] = None) -> tuple[int, int]:
    """Return ``(prefix_bits, prefix_value)`` for a hex prefix field.

    The value is left-justified in the 48-bit space.
    """
    digits = normalize_hex(text)
    if not digits:
        raise MalformedRecord("missing prefix")
    if not _HEX.fullmatch(digits):
        raise MalformedRecord(f"prefix is not hexadecimal: {text!r}")
    bits = WIDTH_BY_DIGITS.get(len(digits))
    if bits is None:
        raise MalformedRecord(f"prefix {text!r} has {len(digits)} hex digits, expected 6, 7 or 9")
    if expected_bits is not None and bits != expected_bits:
        raise MalformedRecord(f"prefix {text!r} is {bits} bits but registry says {expected_bits}")
    return bits, int(digits, 16) << (ADDRESS_BITS - bits)


def parse_fields(fields: List[str]) -> OuiRecord:
    if not fields or not any(fields):
        raise MalformedRecord("empty record")
    expected_bits = REGISTRY_WIDTHS.get(fields[0].upper())
    if expected_bits is not None:
        fields = fields[1:]
    if len(fields) < 2:
        raise MalformedRecord("missing organization")
    prefix_bits, prefix_value = parse_prefix(fields[0], expected_bits)
    organization = fields[1]
    if not organization:
        raise MalformedRecord("empty organization")
    address = fields[2] if len(fields) > 2 else None
    try:
        return OuiRecord(
            prefix_bits=prefix_bits,
            prefix_value=prefix_value,
            organization=organization,
            registered_address=address,
        )
    except ValidationError as exc:
        raise MalformedRecord(str(exc.errors()[0]["msg"])) from exc


def parse_record(
    line: str,
    delimiter: str = DEFAULT_DELIMITER,
    line_number: Optional[int] = None,
) -> OuiRecord:
    """Parse one registry line, raising :class:`MalformedRecord` on failure."""
    try:
        return parse_fields(split_fields(line, delimiter))
    except MalformedRecord as exc:
        raise MalformedRecord(exc.reason, line=line, line_number=line_number) from None
