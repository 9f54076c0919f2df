"""Tests for alias configuration endpoints."""
import json

from fastapi.testclient import TestClient


def test_get_aliases_empty(client: TestClient):
    """Test that no aliases are configured initially."""
    response = client.get("/api/v1/aliases")
    assert response.status_code == 200
    assert response.json() == []


def test_save_aliases(client: TestClient, alias_store):
    """Test replacing alias groups."""
    groups = [
        {"category": "color", "aliases": ["red", "crimson"]},
        {"category": "size", "aliases": ["large", "big"]},
    ]

    response = client.put("/api/v1/aliases", json=groups)

    assert response.status_code == 200
    assert response.json() == groups
    assert client.get("/api/v1/aliases").json() == groups
    assert json.loads(alias_store.path.read_text())["tag_aliases"] == groups


def test_save_invalid_aliases(client: TestClient):
    """Test that invalid groups are rejected and nothing changes."""
    client.put("/api/v1/aliases", json=[{"category": "color", "aliases": ["red", "crimson"]}])

    response = client.put("/api/v1/aliases", json=[{"category": "color", "aliases": []}])

    assert response.status_code == 400
    assert client.get("/api/v1/aliases").json() == [
        {"category": "color", "aliases": ["red", "crimson"]}
    ]
