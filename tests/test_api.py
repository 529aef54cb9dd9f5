"""Tests for the HTTP adapter."""

import pytest
from fastapi.testclient import TestClient

from content_engine.application.api import create_app
from tests.fakes import FakeBackend, OUTLINE_TEXT, RESEARCH_JSON, stage_script

PROJECT = {
    "project_id": "proj-api",
    "client_id": "client-1",
    "client_name": "Acme Analytics",
    "title": "Engineering blog",
    "industry": "developer tooling",
}


@pytest.fixture
def make_client(settings):
    def factory(backend):
        return TestClient(create_app(backend, settings=settings))
    return factory


def _create_project(client):
    response = client.post("/api/v1/projects", json=PROJECT)
    assert response.status_code == 201


def test_health(make_client):
    with make_client(FakeBackend()) as client:
        assert client.get("/health").json() == {"status": "ok"}


def test_create_and_fetch_content(make_client):
    with make_client(FakeBackend(stage_script())) as client:
        _create_project(client)

        response = client.post(
            "/api/v1/projects/proj-api/content",
            json={"title": "Async Python", "content_type": "BlogPost"}
        )
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "Review"
        assert body["version"] == 4

        fetched = client.get(f"/api/v1/content/{body['content_id']}")
        assert fetched.status_code == 200
        assert fetched.json()["body"] == body["body"]

        events = client.get(f"/api/v1/content/{body['content_id']}/events").json()
        assert events[0]["status"] == "started"
        assert events[-1]["status"] == "completed"

        listed = client.get("/api/v1/projects/proj-api/content").json()
        assert [item["content_id"] for item in listed] == [body["content_id"]]


def test_unknown_project_is_404(make_client):
    with make_client(FakeBackend()) as client:
        response = client.post(
            "/api/v1/projects/missing/content",
            json={"title": "Async Python", "content_type": "BlogPost"}
        )
        assert response.status_code == 404
        assert client.get("/api/v1/content/missing").status_code == 404
        assert client.get("/api/v1/projects/missing/context/metrics").status_code == 404


def test_blank_title_is_422(make_client):
    with make_client(FakeBackend()) as client:
        _create_project(client)
        response = client.post(
            "/api/v1/projects/proj-api/content",
            json={"title": "   ", "content_type": "BlogPost"}
        )
        assert response.status_code == 422


def test_pipeline_failure_returns_partial_content(make_client):
    backend = FakeBackend([RESEARCH_JSON, OUTLINE_TEXT], default=RuntimeError("model overloaded"))
    with make_client(backend) as client:
        _create_project(client)

        response = client.post(
            "/api/v1/projects/proj-api/content",
            json={"title": "Async Python", "content_type": "BlogPost"}
        )

        assert response.status_code == 502
        body = response.json()
        assert body["failed_stage"] == "draft"
        assert body["timed_out"] is False
        assert body["content"]["status"] == "Drafting"
        assert body["content"]["metadata"]["failed_stage"] == "draft"


def test_context_endpoints(make_client):
    with make_client(FakeBackend(stage_script())) as client:
        _create_project(client)
        client.post(
            "/api/v1/projects/proj-api/content",
            json={"title": "Async Python", "content_type": "BlogPost"}
        )

        response = client.post("/api/v1/projects/proj-api/context/knowledge", json={"region": "EU"})
        assert response.status_code == 204

        metrics = client.get("/api/v1/projects/proj-api/context/metrics").json()
        assert metrics["entry_count"] == 10
        assert metrics["token_capacity"] == 8000

        exported = client.get("/api/v1/projects/proj-api/context/export").json()
        assert exported["project_id"] == "proj-api"

        imported = client.post("/api/v1/context/import", json={"serialized": exported["serialized"]})
        assert imported.status_code == 200
        assert imported.json()["project_id"] == "proj-api"

        bad = client.post("/api/v1/context/import", json={"serialized": "{}"})
        assert bad.status_code == 422

        generation = client.get("/api/v1/metrics/generation").json()
        assert generation["total_generations"] == 5
