"""Tests for bulk tag editor endpoints."""
from fastapi.testclient import TestClient


def test_bulk_form(client: TestClient, catalogue):
    """Test categories and recent files for the editor."""
    data = client.get("/api/v1/bulk-tag").json()

    assert data["categories"] == ["color", "size"]
    assert [f["id"] for f in data["recent_files"]] == [5, 4, 3, 2, 1]


def test_bulk_add_by_range(client: TestClient, catalogue):
    """Test adding a tag to an ID range."""
    response = client.post(
        "/api/v1/bulk-tag",
        json={"selection_mode": "range", "file_range": "3-5", "category": "mood", "value": "happy"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["file_ids"] == [3, 4, 5]
    assert data["memberships_changed"] == 3
    assert data["warning"] == ""
    assert data["success"].startswith("Tag 'mood: happy' added to 3 files")
    assert client.get("/api/v1/files/4").json()["tags"]["mood"] == ["happy"]


def test_bulk_remove_by_tag_query(client: TestClient, catalogue):
    """Test removing a whole category from files matching a tag query."""
    response = client.post(
        "/api/v1/bulk-tag",
        json={
            "selection_mode": "tags",
            "tag_query": "size:large",
            "category": "color",
            "operation": "remove",
        },
    )

    assert response.status_code == 200
    assert response.json()["file_ids"] == [1, 2]
    assert client.get("/api/v1/files/1").json()["tags"] == {"size": ["large"]}
    assert client.get("/api/v1/files/3").json()["tags"] == {"color": ["crimson"]}


def test_bulk_missing_ids_warning(client: TestClient, catalogue):
    """Test that missing IDs are reported and skipped."""
    response = client.post(
        "/api/v1/bulk-tag",
        json={"file_range": "5,8", "category": "mood", "value": "happy"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["missing_ids"] == [8]
    assert data["warning"] == "file IDs not found: [8]"


def test_bulk_remove_unknown_category(client: TestClient, catalogue):
    """Test removing from a category that does not exist."""
    response = client.post(
        "/api/v1/bulk-tag",
        json={"file_range": "1", "category": "mood", "value": "happy", "operation": "remove"},
    )

    assert response.status_code == 404
    assert "mood" in response.json()["detail"]
    assert client.get("/api/v1/bulk-tag").json()["categories"] == ["color", "size"]


def test_bulk_invalid_range(client: TestClient, catalogue):
    """Test reversed range."""
    response = client.post(
        "/api/v1/bulk-tag",
        json={"file_range": "5-3", "category": "mood", "value": "happy"},
    )

    assert response.status_code == 400


def test_bulk_invalid_operation(client: TestClient, catalogue):
    """Test operation outside add/remove."""
    response = client.post(
        "/api/v1/bulk-tag",
        json={"file_range": "1", "category": "mood", "value": "happy", "operation": "toggle"},
    )

    assert response.status_code == 422
