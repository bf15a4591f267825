"""Resolve MAC address text against a :class:`PrefixIndex`.

Lookups never raise for bad input or misses; they return one of the
result models.  Calling :func:`resolve` without an index is a
programming error and raises :class:`IndexNotReady`.
"""
from __future__ import annotations

import threading
from typing import Any, Iterable, List, Optional

from ouilookup.errors import AddressFormatError, IndexNotReady
from ouilookup.index import PrefixIndex
from ouilookup.loader import Source, load
from ouilookup.log import get_logger
from ouilookup.mac import format_mac, is_locally_administered, parse_mac
from ouilookup.models import InvalidAddressFormat, LookupResult, Resolved, Unresolved

logger = get_logger("engine")


def resolve(index: Optional[PrefixIndex], mac_text: Any) -> LookupResult:
    if index is None:
        raise IndexNotReady("registry index has not been built")
    try:
        address = parse_mac(mac_text)
    except AddressFormatError as exc:
        return InvalidAddressFormat(mac_text=str(mac_text), reason=str(exc))
    mac = format_mac(address)
    record = index.lookup(address)
    if record is None:
        return Unresolved(mac=mac, locally_administered=is_locally_administered(address))
    return Resolved(
        mac=mac,
        organization=record.organization,
        registered_address=record.registered_address,
        matched_prefix_bits=record.prefix_bits,
        prefix=record.prefix_hex,
    )


class LookupEngine:
    """Holds the current index and swaps in rebuilt ones.

    Readers use whatever index reference they pick up; a reload builds a
    complete new index before replacing the reference, so no reader ever
    sees a partially loaded registry.
    """

    def __init__(self, index: Optional[PrefixIndex] = None) -> None:
        self._index = index
        self._reload_lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return self._index is not None

    @property
    def index(self) -> PrefixIndex:
        index = self._index
        if index is None:
            raise IndexNotReady("registry index has not been built")
        return index

    def swap(self, index: PrefixIndex) -> Optional[PrefixIndex]:
        """Replace the served index, returning the previous one."""
        if not isinstance(index, PrefixIndex):
            raise TypeError(f"expected PrefixIndex, got {type(index).__name__}")
        previous, self._index = self._index, index
        return previous

    def reload(self, source: Source, **options: Any) -> PrefixIndex:
        """Build a new index from ``source`` and swap it in.

        On :class:`~ouilookup.errors.LoadError` the current index keeps
        serving.
        """
        with self._reload_lock:
            index = load(source, **options)
            self.swap(index)
        logger.info("serving %d records from %s", len(index), index.source)
        return index

    def resolve(self, mac_text: Any) -> LookupResult:
        return resolve(self._index, mac_text)

    def resolve_many(self, mac_texts: Iterable[Any]) -> List[LookupResult]:
        index = self.index
        return [resolve(index, text) for text in mac_texts]
