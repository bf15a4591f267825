"""Longest-prefix lookup over the three IEEE block sizes.

Only 24, 28 and 36 bit prefixes exist, so the index is three flat
``prefix_value -> record`` tables probed narrowest block first instead of
a general trie.  A 36-bit (MA-S) delegation always wins over the 28-bit or
24-bit block it is carved out of.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional

from ouilookup.errors import DuplicatePrefix
from ouilookup.log import get_logger
from ouilookup.models import ADDRESS_BITS, BLOCK_NAMES, PREFIX_WIDTHS, OuiRecord, RegistryStats

logger = get_logger("index")

# Probe order: most specific first.
PROBE_ORDER = tuple(sorted(PREFIX_WIDTHS, reverse=True))

_ADDRESS_LIMIT = 1 << ADDRESS_BITS


def prefix_mask(bits: int) -> int:
    """Mask selecting the top ``bits`` bits of a 48-bit address."""
    return ((1 << bits) - 1) << (ADDRESS_BITS - bits)


_MASKS = {bits: prefix_mask(bits) for bits in PREFIX_WIDTHS}


class PrefixIndex:
    """Immutable registry index.  Build it with :meth:`build`."""

    __slots__ = ("_tables", "_source", "_size")

    def __init__(
        self,
        tables: Mapping[int, Mapping[int, OuiRecord]],
        source: Optional[str] = None,
    ) -> None:
        frozen = {
            bits: MappingProxyType(dict(tables.get(bits, {})))
            for bits in PREFIX_WIDTHS
        }
        object.__setattr__(self, "_tables", MappingProxyType(frozen))
        object.__setattr__(self, "_source", source)
        object.__setattr__(self, "_size", sum(len(table) for table in frozen.values()))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def build(cls, records: Iterable[OuiRecord], source: Optional[str] = None) -> "PrefixIndex":
        """Partition ``records`` by width.

        Raises :class:`DuplicatePrefix` if two records of the same width
        share a prefix value; nothing is returned in that case.
        """
        tables: Dict[int, Dict[int, OuiRecord]] = {bits: {} for bits in PREFIX_WIDTHS}
        for record in records:
            table = tables[record.prefix_bits]
            existing = table.get(record.prefix_value)
            if existing is not None:
                raise DuplicatePrefix(existing, record)
            table[record.prefix_value] = record
        index = cls(tables, source=source)
        logger.debug("built index with %d records from %s", len(index), source or "memory")
        return index

    @property
    def source(self) -> Optional[str]:
        return self._source

    def lookup(self, address: int) -> Optional[OuiRecord]:
        """Return the most specific record covering ``address``, or None."""
        if not isinstance(address, int) or not 0 <= address < _ADDRESS_LIMIT:
            raise ValueError(f"address must be a 48-bit unsigned int, got {address!r}")
        for bits in PROBE_ORDER:
            record = self._tables[bits].get(address & _MASKS[bits])
            if record is not None:
                return record
        return None

    def get(self, prefix_bits: int, prefix_value: int) -> Optional[OuiRecord]:
        """Exact-match retrieval from a single partition."""
        table = self._tables.get(prefix_bits)
        if table is None:
            return None
        return table.get(prefix_value)

    def table(self, prefix_bits: int) -> Mapping[int, OuiRecord]:
        return self._tables[prefix_bits]

    def counts(self) -> Dict[int, int]:
        return {bits: len(self._tables[bits]) for bits in PREFIX_WIDTHS}

    def stats(self) -> RegistryStats:
        return RegistryStats(
            source=self._source,
            total=self._size,
            by_block={BLOCK_NAMES[bits]: count for bits, count in self.counts().items()},
        )

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[OuiRecord]:
        for bits in PREFIX_WIDTHS:
            table = self._tables[bits]
            for value in sorted(table):
                yield table[value]

    def __contains__(self, record: object) -> bool:
        if not isinstance(record, OuiRecord):
            return False
        return self.get(record.prefix_bits, record.prefix_value) == record

    def __repr__(self) -> str:
        return f"PrefixIndex(records={self._size}, source={self._source!r})"
