"""Resolve MAC addresses to the organization owning their IEEE block."""
from __future__ import annotations

from ouilookup.engine import LookupEngine, resolve
from ouilookup.errors import (
    AddressFormatError,
    DuplicatePrefix,
    IndexNotReady,
    LoadError,
    MalformedRecord,
    OuiError,
)
from ouilookup.index import PrefixIndex
from ouilookup.loader import load
from ouilookup.models import InvalidAddressFormat, LookupResult, OuiRecord, Resolved, Unresolved

__version__ = "1.0.0"

__all__ = [
    "AddressFormatError",
    "DuplicatePrefix",
    "IndexNotReady",
    "InvalidAddressFormat",
    "LoadError",
    "LookupEngine",
    "LookupResult",
    "MalformedRecord",
    "OuiError",
    "OuiRecord",
    "PrefixIndex",
    "Resolved",
    "Unresolved",
    "load",
    "resolve",
]
