"""
Integration tests for the HTTP API.

Exercises health, version, scoring, clustering and briefing endpoints through
the real FastAPI application.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from redflag_engine.api.app import app
from redflag_engine.version import API_VERSION

pytestmark = pytest.mark.integration


@pytest.fixture
def client():
    """Create test client for FastAPI app."""
    return TestClient(app)


def message_payload(id, subject, minutes_ago=0, sender="alice@example.com", thread_id="", body="See notes."):
    received = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    return {
        "id": id,
        "thread_id": thread_id,
        "source": "gmail",
        "from": {"email": sender, "name": None},
        "to": [{"email": "me@example.com"}],
        "subject": subject,
        "body": body,
        "received_at": received.isoformat(),
    }


@pytest.fixture
def urgent_payload():
    """A fast VIP thread ending in an urgent message, plus one quiet message."""
    return {
        "messages": [
            message_payload("u-0", "Contract renewal", 20, "boss@acme.com", "t-urgent"),
            message_payload("u-1", "Re: Contract renewal", 10, "boss@acme.com", "t-urgent"),
            message_payload("u-2", "Urgent: contract renewal", 0, "boss@acme.com", "t-urgent"),
            message_payload("q-0", "Lunch on Friday", 5, body="Want to grab lunch together?"),
        ],
        "vips": [
            {"id": "vip-1", "email": "boss@acme.com", "name": "The Boss", "added_at": "2026-01-01T00:00:00Z"}
        ],
    }


class TestHealthAndVersion:
    """Test monitoring endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == API_VERSION
        assert data["uptime_seconds"] >= 0
        assert data["pattern_count"] == 27
        assert data["engine_version"].startswith("Engine-")

    def test_version(self, client):
        response = client.get("/api/v1/version")

        assert response.status_code == 200
        data = response.json()
        assert data["api_version"] == API_VERSION
        assert "scorer_version" in data["engine_version"]
        assert "clusterer_version" in data["engine_version"]
        assert data["engine_id"] == "Engine-" + "-".join(
            data["engine_version"][k] for k in ("scorer_version", "clusterer_version", "pattern_set_version")
        )

    def test_process_time_header(self, client):
        response = client.get("/health")

        assert "X-Process-Time" in response.headers

    def test_request_id_generated(self, client):
        response = client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 36

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"


class TestScoreEndpoint:
    """Test POST /api/v1/red-flags/score."""

    def test_score_flags_urgent_vip_thread(self, client, urgent_payload):
        response = client.post("/api/v1/red-flags/score", json=urgent_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total_count"] == 4
        urgent = data["scores"]["u-2"]
        assert urgent["is_flagged"] is True
        assert urgent["score"] >= 0.7
        assert urgent["severity"] in ("high", "critical")
        assert len(urgent["signal_breakdown"]) == 4
        assert data["scores"]["q-0"]["is_flagged"] is False

    def test_score_empty_batch(self, client):
        response = client.post("/api/v1/red-flags/score", json={"messages": []})

        assert response.status_code == 200
        assert response.json()["total_count"] == 0

    def test_missing_sender_rejected(self, client):
        payload = message_payload("bad", "No sender")
        del payload["from"]

        response = client.post("/api/v1/red-flags/score", json={"messages": [payload]})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["detail"][0]["loc"][-1] == "from"

    def test_missing_messages_rejected(self, client):
        response = client.post("/api/v1/red-flags/score", json={})

        assert response.status_code == 422


class TestClusterEndpoint:
    """Test POST /api/v1/topics/cluster."""

    def test_cluster(self, client, urgent_payload):
        response = client.post("/api/v1/topics/cluster", json={"messages": urgent_payload["messages"]})

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["total_emails"] == 4
        assert result["cluster_count"] == 1
        assert result["clusters"][0]["thread_ids"] == ["t-urgent"]
        assert result["unclustered_email_ids"] == ["q-0"]

    def test_cluster_overrides(self, client, urgent_payload):
        payload = {"messages": urgent_payload["messages"], "min_cluster_size": 1}

        response = client.post("/api/v1/topics/cluster", json=payload)

        assert response.status_code == 200
        assert response.json()["result"]["cluster_count"] == 2

    def test_invalid_override_rejected(self, client):
        response = client.post("/api/v1/topics/cluster", json={"messages": [], "min_cluster_size": 0})

        assert response.status_code == 422


class TestBriefingEndpoint:
    """Test POST /api/v1/briefing."""

    def test_briefing(self, client, urgent_payload):
        response = client.post("/api/v1/briefing", json=urgent_payload)

        assert response.status_code == 200
        briefing = response.json()["briefing"]
        assert briefing["total_messages"] == 4
        assert briefing["total_flagged"] == 3
        assert briefing["topics"][0]["flagged_count"] == 3
        assert briefing["topics"][-1]["id"] == "unclustered"
        assert set(briefing["scores"]) == {"u-0", "u-1", "u-2", "q-0"}

    def test_briefing_max_topics(self, client, urgent_payload):
        response = client.post("/api/v1/briefing", json={**urgent_payload, "max_topics": 1})

        assert response.status_code == 200
        assert len(response.json()["briefing"]["topics"]) == 1


@pytest.mark.asyncio
async def test_health_async(async_client):
    """The app also serves through an async client."""
    response = await async_client.get("/health")

    assert response.status_code == 200
