"""Integration tests for ouilookup.web.api (FastAPI endpoints).

The module-level engine is replaced per test with one serving a small
registry, so no registry file has to exist on the machine.
"""
from __future__ import annotations

from unittest.mock import patch

import pytest

import ouilookup.web.api as api_module
from ouilookup.config import RegistrySettings
from ouilookup.engine import LookupEngine


@pytest.fixture
def engine(index):
    test_engine = LookupEngine(index)
    with patch.object(api_module, "engine", test_engine):
        yield test_engine


@pytest.fixture
def client(engine):
    """Provide a Starlette TestClient wired to the FastAPI app."""
    from starlette.testclient import TestClient
    return TestClient(api_module.app)


class TestResolveEndpoint:
    def test_resolve_hit(self, client):
        """GET /api/v1/resolve returns the resolved organization."""
        resp = client.get("/api/v1/resolve", params={"mac": "AC:DE:48:11:22:33"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "resolved"
        assert data["organization"] == "Example Corp"
        assert data["matched_prefix_bits"] == 24

    def test_resolve_nested(self, client):
        """The MA-S delegation wins over its MA-L parent over HTTP too."""
        data = client.get("/api/v1/resolve", params={"mac": "70b3d5f2f0aa"}).json()
        assert data["organization"] == "Tiny Sensors GmbH"
        assert data["prefix"] == "70B3D5F2F"

    def test_resolve_miss(self, client):
        """An unregistered address is a 200 with status 'unresolved'."""
        resp = client.get("/api/v1/resolve", params={"mac": "00:11:22:33:44:55"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "unresolved"

    def test_resolve_invalid(self, client):
        """Malformed MAC text is a 400."""
        resp = client.get("/api/v1/resolve", params={"mac": "not-a-mac"})
        assert resp.status_code == 400

    def test_resolve_batch(self, client):
        """POST /api/v1/resolve returns one typed result per input, in order."""
        resp = client.post(
            "/api/v1/resolve",
            json={"macs": ["AC-DE-48-00-00-01", "bogus", "02:00:00:00:00:01"]},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert [item["status"] for item in data] == ["resolved", "invalid", "unresolved"]
        assert data[2]["locally_administered"] is True

    def test_resolve_batch_empty(self, client):
        """An empty batch is rejected by validation."""
        resp = client.post("/api/v1/resolve", json={"macs": []})
        assert resp.status_code == 422


class TestNotReady:
    def test_resolve_before_load(self):
        """Lookups answer 503 until a registry has been loaded."""
        from starlette.testclient import TestClient
        with patch.object(api_module, "engine", LookupEngine()):
            client = TestClient(api_module.app)
            assert client.get("/api/v1/resolve", params={"mac": "AC:DE:48:11:22:33"}).status_code == 503
            assert client.get("/api/v1/registry").status_code == 503


class TestRegistryEndpoints:
    def test_registry_stats(self, client):
        """GET /api/v1/registry reports per-block counts."""
        resp = client.get("/api/v1/registry")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 4
        assert data["by_block"] == {"MA-L": 2, "MA-M": 1, "MA-S": 1}

    def test_reload_swaps_index(self, client, engine, registry_file):
        """POST /api/v1/registry/reload serves the freshly built registry."""
        with patch.object(api_module, "settings", RegistrySettings(path=registry_file)):
            resp = client.post("/api/v1/registry/reload")
        assert resp.status_code == 200
        assert resp.json()["stats"]["total"] == 5
        assert engine.index.source == str(registry_file)
        data = client.get("/api/v1/resolve", params={"mac": "00:1B:63:00:00:01"}).json()
        assert data["organization"] == "Apple, Inc."

    def test_failed_reload_keeps_serving(self, client, engine, tmp_path):
        """A broken registry is rejected with 422 and the old one stays live."""
        bad = tmp_path / "bad.csv"
        bad.write_text("ACDE48;Example Corp\nNOTHEX;Bad\n", encoding="utf-8")
        before = engine.index
        with patch.object(api_module, "settings", RegistrySettings(path=bad)):
            resp = client.post("/api/v1/registry/reload")
        assert resp.status_code == 422
        assert engine.index is before


class TestApiKey:
    def test_key_required_when_configured(self, client):
        """With an api_key configured, requests need a bearer token."""
        with patch.object(api_module, "_api_key", "secret"):
            assert client.get("/api/v1/registry").status_code == 401
            resp = client.get("/api/v1/registry", headers={"Authorization": "Bearer secret"})
            assert resp.status_code == 200
            assert client.get("/api/v1/registry", params={"token": "secret"}).status_code == 200
