"""Tests for ouilookup.engine (resolve and LookupEngine)."""
from __future__ import annotations

import threading

import pytest

from ouilookup.engine import LookupEngine, resolve
from ouilookup.errors import IndexNotReady, LoadError
from ouilookup.index import PrefixIndex
from ouilookup.loader import load
from ouilookup.models import InvalidAddressFormat, OuiRecord, Resolved, Unresolved


class TestResolve:
    def test_resolved(self, index: PrefixIndex):
        """A registered address resolves to its organization and block width."""
        result = resolve(index, "AC:DE:48:11:22:33")
        assert isinstance(result, Resolved)
        assert result.organization == "Example Corp"
        assert result.matched_prefix_bits == 24
        assert result.prefix == "ACDE48"
        assert result.mac == "AC:DE:48:11:22:33"

    def test_narrowest_match(self, index: PrefixIndex):
        """The MA-S block wins over the MA-L block containing it."""
        result = resolve(index, "70-b3-d5-f2-f0-01")
        assert result.organization == "Tiny Sensors GmbH"
        assert result.matched_prefix_bits == 36
        assert result.registered_address == "Hauptstrasse 1, Berlin"

    def test_unresolved(self, index: PrefixIndex):
        """A valid but unregistered address is Unresolved, not an error."""
        result = resolve(index, "00:11:22:33:44:55")
        assert isinstance(result, Unresolved)
        assert result.locally_administered is False

    def test_unresolved_locally_administered(self, index: PrefixIndex):
        """Unresolved results note a set U/L bit."""
        result = resolve(index, "02:00:00:00:00:01")
        assert isinstance(result, Unresolved)
        assert result.locally_administered is True

    @pytest.mark.parametrize("text", ["not-a-mac", "", "AC:DE:48", None, 12345, "acde4800\ufb0001"])
    def test_invalid(self, index: PrefixIndex, text):
        """Bad input is returned as InvalidAddressFormat, never raised."""
        result = resolve(index, text)
        assert isinstance(result, InvalidAddressFormat)
        assert result.reason

    def test_delimiter_agnostic(self, index: PrefixIndex):
        """All spellings of one address resolve identically."""
        results = {
            resolve(index, text).model_dump_json()
            for text in ("AC:DE:48:00:00:01", "AC-DE-48-00-00-01", "acde48000001", "acde.4800.0001")
        }
        assert len(results) == 1

    def test_deterministic(self, index: PrefixIndex):
        """Repeated calls with the same input give equal results."""
        assert resolve(index, "70:B3:D5:A1:23:45") == resolve(index, "70:B3:D5:A1:23:45")

    def test_without_index(self):
        """Resolving with no index is a contract violation."""
        with pytest.raises(IndexNotReady):
            resolve(None, "AC:DE:48:11:22:33")


class TestLookupEngine:
    def test_not_ready(self):
        """A fresh engine refuses lookups until an index is swapped in."""
        engine = LookupEngine()
        assert engine.ready is False
        with pytest.raises(IndexNotReady):
            engine.resolve("AC:DE:48:11:22:33")
        with pytest.raises(IndexNotReady):
            engine.index

    def test_swap_returns_previous(self, index: PrefixIndex):
        """swap replaces the reference and hands back the old index."""
        engine = LookupEngine()
        assert engine.swap(index) is None
        replacement = PrefixIndex.build([])
        assert engine.swap(replacement) is index
        assert isinstance(engine.resolve("AC:DE:48:11:22:33"), Unresolved)

    def test_swap_rejects_non_index(self):
        """Only PrefixIndex instances can be served."""
        with pytest.raises(TypeError):
            LookupEngine().swap({})

    def test_reload(self, registry_file):
        """reload builds from a source and starts serving it."""
        engine = LookupEngine()
        index = engine.reload(registry_file)
        assert engine.index is index
        assert engine.resolve("00:1B:63:00:00:01").organization == "Apple, Inc."

    def test_failed_reload_keeps_old_index(self, registry_file, tmp_path):
        """A broken registry never replaces a working one."""
        engine = LookupEngine(load(registry_file))
        before = engine.index
        bad = tmp_path / "bad.csv"
        bad.write_text("ACDE48;Example Corp\nNOTHEX;Bad\n", encoding="utf-8")
        with pytest.raises(LoadError):
            engine.reload(bad)
        assert engine.index is before

    def test_old_index_unaffected_by_reload(self, index: PrefixIndex):
        """Readers holding the previous index keep seeing its records."""
        engine = LookupEngine(index)
        held = engine.index
        engine.reload(b"001122;New Owner\n")
        assert held.lookup(0xACDE48000001).organization == "Example Corp"
        assert engine.resolve("00:11:22:33:44:55").organization == "New Owner"

    def test_resolve_many(self, index: PrefixIndex):
        """Batch resolution keeps input order and mixes result types."""
        results = LookupEngine(index).resolve_many(["AC:DE:48:00:00:01", "junk", "00:11:22:33:44:55"])
        assert [r.status for r in results] == ["resolved", "invalid", "unresolved"]

    def test_concurrent_readers(self, index: PrefixIndex):
        """Many threads can resolve against a shared engine while it is swapped."""
        engine = LookupEngine(index)
        errors = []
        second = PrefixIndex.build([
            OuiRecord(prefix_bits=24, prefix_value=0xACDE48000000, organization="Example Corp"),
        ])

        def reader():
            for _ in range(200):
                result = engine.resolve("AC:DE:48:11:22:33")
                if not isinstance(result, Resolved) or result.organization != "Example Corp":
                    errors.append(result)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for _ in range(50):
            engine.swap(second)
            engine.swap(index)
        for t in threads:
            t.join()
        assert errors == []
