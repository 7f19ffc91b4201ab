"""Tests for src/api/main.py — agents are mocked, no TheHive calls."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from src.api.main import app
from src.models.agent_io import AlertOutput
from src.models.alert import Alert


@pytest.fixture
def client():
    return TestClient(app)


def make_output(source: str = "RedCanary", source_ref: str = "det-42") -> AlertOutput:
    alert = Alert(
        type="event",
        source=source,
        source_ref=source_ref,
        title="t",
        description="d",
        date=0,
    )
    return AlertOutput(alert=alert, result={"_id": "~1"})


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"


class TestRedCanaryWebhook:
    def test_created(self, client):
        run = AsyncMock(return_value=make_output())
        with patch("src.agents.redcanary.run", run):
            resp = client.post("/api/v1/webhooks/redcanary", json={"Detection": {"id": "det-42"}})
        assert resp.status_code == 200
        body = resp.json()
        assert body["source_ref"] == "det-42"
        assert body["result"] == {"_id": "~1"}
        assert run.call_args.args[0].raw_payload == {"Detection": {"id": "det-42"}}

    def test_invalid_payload_is_422(self, client):
        run = AsyncMock(side_effect=ValueError("RedCanaryAgent: payload has no 'Detection' object"))
        with patch("src.agents.redcanary.run", run):
            resp = client.post("/api/v1/webhooks/redcanary", json={})
        assert resp.status_code == 422
        assert "Detection" in resp.json()["detail"]


class TestSentinelWebhook:
    def test_created(self, client):
        run = AsyncMock(return_value=make_output("Azure Sentinel", "12345"))
        with patch("src.agents.sentinel.run", run):
            resp = client.post("/api/v1/webhooks/sentinel", json={"object": {"properties": {}}})
        assert resp.status_code == 200
        assert resp.json()["source"] == "Azure Sentinel"

    def test_invalid_payload_is_422(self, client):
        run = AsyncMock(side_effect=ValueError("no object.properties"))
        with patch("src.agents.sentinel.run", run):
            resp = client.post("/api/v1/webhooks/sentinel", json={})
        assert resp.status_code == 422


class TestGenericWebhook:
    def test_routed(self, client):
        run = AsyncMock(return_value=make_output())
        with patch("src.agents.routing.run", run):
            resp = client.post("/api/v1/webhooks", json={"Detection": {}})
        assert resp.status_code == 200

    def test_unknown_source_is_422(self, client):
        resp = client.post("/api/v1/webhooks", json={"foo": "bar"})
        assert resp.status_code == 422
        assert "cannot determine alert source" in resp.json()["detail"]

    def test_source_query_parameter_routes_without_detection(self, client):
        run = AsyncMock(return_value=make_output("Azure Sentinel", "12345"))
        with patch("src.agents.sentinel.run", run):
            resp = client.post("/api/v1/webhooks?source=sentinel", json={"Detection": {}})
        assert resp.status_code == 200
        assert resp.json()["source"] == "Azure Sentinel"
        assert run.call_args.args[0].raw_payload == {"Detection": {}}

    def test_unknown_source_query_parameter_is_422(self, client):
        resp = client.post("/api/v1/webhooks?source=splunk", json={"Detection": {}})
        assert resp.status_code == 422


class TestCollaboratorFailures:
    INCIDENT = {
        "object": {
            "properties": {
                "providerName": "Azure Sentinel",
                "providerIncidentId": "12345",
                "title": "Phishing",
                "severity": "High",
                "createdTimeUtc": "2025-01-30T14:32:15Z",
                "relatedEntities": [],
                "additionalData": {"techniques": ["T1"]},
            }
        }
    }

    def test_malformed_pattern_is_server_error_not_422(self):
        client = TestClient(app, raise_server_exceptions=False)
        lookup = AsyncMock(return_value=[{"patternId": "T1", "tactics": ["execution"]}])
        create = AsyncMock()
        with patch("src.agents.techniques._lookup_pattern", lookup), \
             patch("src.agents.sentinel._create_alert", create):
            resp = client.post("/api/v1/webhooks/sentinel", json=self.INCIDENT)
        assert resp.status_code == 500
        create.assert_not_called()

    def test_malformed_pattern_propagates_unchanged(self, client):
        lookup = AsyncMock(return_value=[{"patternId": "T1", "tactics": ["execution"]}])
        with patch("src.agents.techniques._lookup_pattern", lookup), \
             patch("src.agents.sentinel._create_alert", AsyncMock()):
            with pytest.raises(ValidationError):
                client.post("/api/v1/webhooks", json=self.INCIDENT)
