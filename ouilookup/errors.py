"""Exception taxonomy for registry loading and lookups."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ouilookup.models import OuiRecord


class OuiError(Exception):
    """Base class for every error raised by ouilookup."""


class MalformedRecord(OuiError):
    """A single registry line could not be parsed."""

    def __init__(self, reason: str, line: str = "", line_number: Optional[int] = None) -> None:
        self.reason = reason
        self.line = line
        self.line_number = line_number
        where = f"line {line_number}: " if line_number is not None else ""
        shown = line.strip()
        if len(shown) > 80:
            shown = shown[:77] + "..."
        super().__init__(f"{where}{reason} ({shown!r})" if line else f"{where}{reason}")


class DuplicatePrefix(OuiError):
    """Two records of the same width share a prefix value."""

    def __init__(self, existing: "OuiRecord", duplicate: "OuiRecord") -> None:
        self.existing = existing
        self.duplicate = duplicate
        self.prefix_bits = existing.prefix_bits
        self.prefix_value = existing.prefix_value
        super().__init__(
            f"duplicate {existing.prefix_bits}-bit prefix {existing.prefix_hex}: "
            f"{existing.organization!r} and {duplicate.organization!r}"
        )


class LoadError(OuiError):
    """A registry source could not be turned into an index.

    ``first_error`` is the first failure encountered and ``failed`` the
    number of lines that could not be parsed.
    """

    def __init__(
        self,
        source: str,
        first_error: Optional[BaseException] = None,
        failed: int = 0,
        skipped: int = 0,
    ) -> None:
        self.source = source
        self.first_error = first_error
        self.failed = failed
        self.skipped = skipped
        message = f"failed to load registry {source}"
        if first_error is not None:
            message += f": {first_error}"
        if failed:
            message += f" ({failed} malformed line{'s' if failed != 1 else ''}, {skipped} skipped)"
        super().__init__(message)


class AddressFormatError(OuiError, ValueError):
    """Text that does not decode to exactly 48 bits of hex."""


class IndexNotReady(OuiError, RuntimeError):
    """A lookup was attempted before an index was built."""
