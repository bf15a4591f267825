"""Read a registry table and build a :class:`PrefixIndex` from it."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from ouilookup.errors import DuplicatePrefix, LoadError, MalformedRecord
from ouilookup.index import PrefixIndex
from ouilookup.log import get_logger
from ouilookup.models import BLOCK_NAMES, OuiRecord
from ouilookup.records import (
    detect_delimiter,
    is_header,
    parse_record,
    split_fields,
    validate_delimiter,
)

logger = get_logger("loader")

Source = Union[str, os.PathLike, bytes]


@dataclass
class LoadReport:
    records: int = 0
    blank: int = 0
    comments: int = 0
    header: int = 0
    failed: int = 0
    first_error: Optional[MalformedRecord] = None

    @property
    def skipped(self) -> int:
        return self.blank + self.comments + self.header + self.failed


def parse_lines(
    lines: Iterable[str],
    *,
    strict: bool = True,
    delimiter: Optional[str] = None,
) -> Tuple[List[OuiRecord], LoadReport]:
    """Parse every line, counting what was skipped.

    Malformed lines never stop the scan, so the report always carries the
    full failure count; callers decide whether any failure is fatal.
    """
    report = LoadReport()
    records: List[OuiRecord] = []
    seen_content = False
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped:
            report.blank += 1
            continue
        if stripped.startswith("#"):
            report.comments += 1
            continue
        if delimiter is None:
            delimiter = detect_delimiter(stripped)
        try:
            if not seen_content:
                seen_content = True
                if is_header(split_fields(stripped, delimiter)):
                    report.header += 1
                    logger.info("skipping header on line %d: %r", number, stripped[:80])
                    continue
            records.append(parse_record(stripped, delimiter, line_number=number))
        except MalformedRecord as exc:
            if exc.line_number is None:
                exc = MalformedRecord(exc.reason, line=stripped, line_number=number)
            report.failed += 1
            if report.first_error is None:
                report.first_error = exc
            if not strict:
                logger.debug("skipping %s", exc)
            continue
        report.records += 1
    return records, report


def _source_name(source: Source) -> str:
    if isinstance(source, (bytes, bytearray)):
        return "<bytes>"
    return str(Path(source))


def _read_lines(source: Source) -> Tuple[List[str], str]:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source).decode("utf-8-sig", errors="replace").splitlines(), _source_name(source)
    path = Path(source)
    try:
        text = path.read_bytes().decode("utf-8-sig", errors="replace")
    except OSError as exc:
        raise LoadError(str(path), first_error=exc) from exc
    return text.splitlines(), str(path)


def load(
    source: Source,
    *,
    strict: bool = True,
    delimiter: Optional[str] = None,
) -> PrefixIndex:
    """Load a registry from a path or raw bytes.

    With ``strict`` (the default) any malformed line aborts the load and
    :class:`LoadError` reports the first one along with the failure count.
    With ``strict=False`` malformed lines are skipped and logged.
    """
    try:
        validate_delimiter(delimiter)
    except ValueError as exc:
        raise LoadError(_source_name(source), first_error=exc) from exc
    lines, name = _read_lines(source)
    records, report = parse_lines(lines, strict=strict, delimiter=delimiter)
    if report.failed:
        if strict:
            raise LoadError(
                name,
                first_error=report.first_error,
                failed=report.failed,
                skipped=report.skipped,
            ) from report.first_error
        logger.warning(
            "skipped %d malformed line(s) in %s; first: %s",
            report.failed,
            name,
            report.first_error,
        )
    try:
        index = PrefixIndex.build(records, source=name)
    except DuplicatePrefix as exc:
        raise LoadError(name, first_error=exc) from exc
    counts = ", ".join(f"{BLOCK_NAMES[bits]}={count}" for bits, count in index.counts().items())
    logger.info("loaded %d records from %s (%s)", len(index), name, counts)
    return index
