"""Tests for the blueprint HTTP routes."""

import pytest
from fastapi.testclient import TestClient

from cv_blueprint.storage.base import UpdateResult
from cv_blueprint.storage.memory import InMemoryBlueprintStore
from cv_blueprint.web.app import create_app


class AlwaysStaleStore(InMemoryBlueprintStore):
    def update_blueprint(self, *args, **kwargs):
        return UpdateResult(success=False)


@pytest.fixture
def store():
    return InMemoryBlueprintStore()


@pytest.fixture
def client(store):
    return TestClient(create_app(store=store))


CV = {
    "name": "Jane Smith",
    "contactInfo": {"email": "jane@example.com"},
    "experience": [{"role": "Developer", "company": "Tech Corp", "duration": "2020-2024"}],
    "skills": ["Python", "Django"],
    "education": [],
    "summary": "",
}


class TestBlueprintRoutes:
    def test_get_creates_on_first_call(self, client):
        first = client.get("/blueprints/user-1")
        second = client.get("/blueprints/user-1")

        assert first.status_code == 200
        assert first.json()["is_new"] is True
        assert second.json()["is_new"] is False
        assert first.json()["blueprint"]["version"] == 1

    def test_merge(self, client):
        response = client.post("/blueprints/user-1", json={"cvMetadata": CV, "cvHash": "cv1"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["merge_summary"]["new_skills"] == 2
        assert body["merge_summary"]["new_experience"] == 1
        assert body["blueprint"]["total_extractions_processed"] == 1
        assert any("Python" in c["description"] for c in body["changes"])

    def test_merge_requires_metadata(self, client):
        response = client.post("/blueprints/user-1", json={"cvHash": "cv1"})
        assert response.status_code == 400

    def test_merge_rejects_empty_extraction(self, client):
        response = client.post("/blueprints/user-1", json={"cv_metadata": {"skills": []}})
        assert response.status_code == 400

    def test_merge_rejects_numeric_hash(self, client):
        response = client.post("/blueprints/user-1", json={"cvMetadata": CV, "cvHash": 12345})
        assert response.status_code == 400
        assert "source_id" in response.json()["error"]

    def test_conflict_is_reported(self):
        client = TestClient(create_app(store=AlwaysStaleStore()))
        response = client.post("/blueprints/user-1", json={"cvMetadata": CV, "cvHash": "cv1"})
        assert response.status_code == 409

    def test_remove_source(self, client):
        client.post("/blueprints/user-1", json={"cvMetadata": CV, "cvHash": "cv1"})

        response = client.delete("/blueprints/user-1/sources/cv1")

        assert response.status_code == 200
        profile = response.json()["blueprint"]["profile_data"]
        assert profile["skills"] == []
        assert profile["experience"] == []
        # contact details are not tracked per source
        assert profile["contact"]["email"] == "jane@example.com"

    def test_remove_source_unknown_subject(self, client):
        response = client.delete("/blueprints/nobody/sources/cv1")
        assert response.status_code == 404

    def test_change_history(self, client):
        client.post("/blueprints/user-1", json={"cvMetadata": CV, "cvHash": "cv1"})

        response = client.get("/blueprints/user-1/changes")

        changes = response.json()["changes"]
        assert changes
        assert {c["version"] for c in changes} == {2}
        assert {c["source_id"] for c in changes} == {"cv1"}
