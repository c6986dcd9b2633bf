"""
Unit tests for the apply-edits endpoint.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock

from ai_editor.api.dependencies import get_store
from ai_editor.main import app
from ai_editor.services.content_store import TransportError


@pytest.fixture
def client(store):
    """Test client backed by the in-memory store."""
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_apply_edits(client, store):
    response = client.post("/apply-edits", json={"edits": [
        {"file_name": "a.txt", "action": "delete", "line": 2, "content": "two"},
        {"file_name": "a.txt", "action": "insert", "line": 2, "content": "TWO"},
        {"file_name": "notes.md", "action": "write", "line": 1, "content": "# Notes"},
    ]})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["results"][0]["file"] == "a.txt"
    assert data["results"][0]["action"] == "updated"
    assert data["results"][0]["content"] == "one\nTWO\nthree"
    assert data["results"][1]["action"] == "created"
    assert store.files["notes.md"] == "# Notes"


def test_per_file_failure_is_reported(client, store):
    response = client.post("/apply-edits", json={"edits": [
        {"file_name": "a.txt", "action": "delete", "line": 1, "content": "uno"},
        {"file_name": "gone.txt", "action": "delete_file", "line": 1, "content": ""},
    ]})

    assert response.status_code == 200
    results = response.json()["results"]
    assert results[0]["success"] is False
    assert results[0]["error_type"] == "DeleteMismatchError"
    assert "expected" in results[0]["error"]
    assert results[1]["error_type"] == "FileNotFoundForDeletionError"
    assert store.commits == []


def test_store_failure_returns_500(client, store):
    store.fail_on("a.txt", TransportError("rate limited"))

    response = client.post("/apply-edits", json={"edits": [
        {"file_name": "a.txt", "action": "write", "line": 1, "content": "x"},
    ]})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to apply edits", "details": "rate limited"}


def test_unexpected_error_returns_500():
    broken_store = AsyncMock()
    broken_store.get_file.side_effect = RuntimeError("boom")
    app.dependency_overrides[get_store] = lambda: broken_store

    try:
        response = TestClient(app).post("/apply-edits", json={"edits": [
            {"file_name": "a.txt", "action": "write", "line": 1, "content": "x"},
        ]})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["details"] == "Internal server error"


def test_invalid_edit_rejected(client, store):
    response = client.post("/apply-edits", json={"edits": [
        {"file_name": "a.txt", "action": "insert", "content": "no line"},
    ]})

    assert response.status_code == 422
    assert store.commits == []


def test_empty_batch(client):
    response = client.post("/apply-edits", json={"edits": []})

    assert response.status_code == 200
    assert response.json() == {"success": True, "results": []}


def test_huge_line_number_rejected(client, store):
    response = client.post("/apply-edits", json={"edits": [
        {"file_name": "a.txt", "action": "insert", "line": 1_000_000_000, "content": "x"},
    ]})

    assert response.status_code == 422
    assert store.commits == []
