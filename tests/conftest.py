from __future__ import annotations

import pytest

from ouilookup.index import PrefixIndex
from ouilookup.models import OuiRecord

REGISTRY_TEXT = (
    "Assignment;Organization Name;Organization Address\n"
    "ACDE48;Example Corp;1 Example Way, Springfield\n"
    "70B3D5;IEEE Registration Authority;445 Hoes Lane, Piscataway NJ\n"
    "70B3D5A;Mid Block Ltd;\n"
    "70B3D5F2F;Tiny Sensors GmbH;Hauptstrasse 1, Berlin\n"
    "\n"
    "001B63;Apple, Inc.\n"
)


@pytest.fixture
def registry_file(tmp_path):
    """Semicolon registry with nested 24/28/36-bit blocks."""
    path = tmp_path / "IEEE_OUI.csv"
    path.write_text(REGISTRY_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def records():
    return [
        OuiRecord(prefix_bits=24, prefix_value=0xACDE48000000, organization="Example Corp"),
        OuiRecord(prefix_bits=24, prefix_value=0x70B3D5000000, organization="IEEE Registration Authority"),
        OuiRecord(prefix_bits=28, prefix_value=0x70B3D5A00000, organization="Mid Block Ltd"),
        OuiRecord(
            prefix_bits=36,
            prefix_value=0x70B3D5F2F000,
            organization="Tiny Sensors GmbH",
            registered_address="Hauptstrasse 1, Berlin",
        ),
    ]


@pytest.fixture
def index(records):
    return PrefixIndex.build(records, source="test")
