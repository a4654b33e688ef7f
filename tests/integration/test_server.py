"""
Integration tests for the FastAPI planet server
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from planet import server
from planet.pipeline import RenderOptions
from planet.store import PlanetStore
from tests.conftest import FakeStreetView


@pytest.fixture
def client(monkeypatch, tmp_path, details_512):
    monkeypatch.setattr(server, "store", PlanetStore(str(tmp_path)))
    monkeypatch.setattr(server, "service", FakeStreetView(details_512, color=(200, 100, 50)))
    monkeypatch.setattr(server, "render_opts", RenderOptions(width=32, height=32, fetch_zoom=1, workers=1))
    return TestClient(server.app)


class TestServer:
    """Test cases for the planet API"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "ok"
        assert body["render"]["size"] == [32, 32]
        assert body["planets"] == 0

    def test_create_requires_panoid(self, client):
        r = client.get("/create")
        assert r.status_code == 400
        assert r.json()["detail"] == "panoid not specified"

    def test_create_renders_in_background(self, client):
        r = client.post("/create", params={"panoid": "pano-512"})
        assert r.status_code == 200
        assert r.text.strip() == "patience is a virtue"

        # TestClient runs background tasks before returning
        listed = client.get("/planets").json()
        assert len(listed) == 1
        assert listed[0]["pano_id"] == "pano-512"

        img = client.get(f"/planets/{listed[0]['blob_key']}")
        assert img.status_code == 200
        assert img.headers["content-type"] == "image/jpeg"
        assert img.content[:2] == b"\xff\xd8"

    def test_failed_render_stores_nothing(self, client, monkeypatch, details_512):
        monkeypatch.setattr(server, "service", FakeStreetView(details_512, fail=[(0, 0)]))
        r = client.get("/create", params={"panoid": "pano-512"})
        assert r.status_code == 200
        assert client.get("/planets").json() == []

    def test_filter_by_panoid(self, client):
        client.get("/create", params={"panoid": "pano-512"})
        assert len(client.get("/planets", params={"panoid": "pano-512"}).json()) == 1
        assert client.get("/planets", params={"panoid": "other"}).json() == []

    def test_unknown_planet(self, client):
        assert client.get("/planets/" + "0" * 64).status_code == 404
        assert client.get("/planets/not-a-key").status_code == 404
