"""HTTP tests for /webhook, /healthz and /metrics.

The app is built with a mocked NotificationStore and a private prometheus
registry, so every test starts with zeroed counters.
"""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry
from starlette.requests import ClientDisconnect

from alertmanager2opensearch.config import Settings
from alertmanager2opensearch.core.errors import StoreWriteError
from alertmanager2opensearch.core.metrics import OutcomeCounters
from alertmanager2opensearch.main import create_app
from alertmanager2opensearch.storage.opensearch_store import NotificationStore

NOW = datetime(2024, 3, 15, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture()
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture()
def store() -> MagicMock:
    mock = MagicMock(spec=NotificationStore)
    mock.index_document.return_value = {"result": "created"}
    return mock


@pytest.fixture()
def app(store, registry):
    web = create_app(Settings(), store, OutcomeCounters(registry))
    web.state.ingestion.clock = lambda: NOW
    return web


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


def _count(registry: CollectorRegistry, name: str) -> float:
    return registry.get_sample_value(f"alertmanager2es_alerts_{name}_total")


def _counts(registry):
    return {n: _count(registry, n) for n in ("received", "invalid", "successful")}


class TestWebhook:
    def test_stores_valid_notification(self, client, store, registry):
        body = {"version": "4", "status": "firing", "commonLabels": {"alertname": "X"}}
        resp = client.post("/webhook", content=json.dumps(body))

        assert resp.status_code == 200
        store.index_document.assert_called_once()
        index, doc = store.index_document.call_args.args
        assert index == "alertmanager-2024.03"
        assert json.loads(doc)["@timestamp"] == "2024-03-15T10:00:00.000000Z"
        assert _counts(registry) == {"received": 1.0, "invalid": 0.0, "successful": 1.0}

    def test_empty_body(self, client, store, registry):
        resp = client.post("/webhook", content=b"")

        assert resp.status_code == 400
        assert "got empty request body" in resp.text
        store.index_document.assert_not_called()
        assert _counts(registry) == {"received": 1.0, "invalid": 1.0, "successful": 0.0}

    def test_malformed_json(self, client, store, registry):
        resp = client.post("/webhook", content=b'{"version": "4",')

        assert resp.status_code == 400
        assert "failed to unmarshal" in resp.text
        store.index_document.assert_not_called()
        assert _count(registry, "invalid") == 1.0

    def test_version_mismatch(self, client, store, registry):
        resp = client.post("/webhook", content=b'{"version": "3", "commonLabels": {"alertname": "X"}}')

        assert resp.status_code == 400
        assert 'do not understand webhook version "3"' in resp.text
        store.index_document.assert_not_called()
        assert _counts(registry) == {"received": 1.0, "invalid": 1.0, "successful": 0.0}

    def test_store_failure_hides_diagnostic(self, client, store, registry):
        store.index_document.side_effect = StoreWriteError("index alertmanager-2024.03: cluster_block_exception")
        resp = client.post("/webhook", content=b'{"version": "4"}')

        assert resp.status_code == 400
        assert "unable to insert document in opensearch" in resp.text
        assert "cluster_block_exception" not in resp.text
        assert store.index_document.call_count == 1
        assert _counts(registry) == {"received": 1.0, "invalid": 1.0, "successful": 0.0}

    def test_body_read_failure(self, app, store, registry, monkeypatch):
        async def disconnected(self):
            raise ClientDisconnect()

        monkeypatch.setattr("starlette.requests.Request.body", disconnected)
        resp = TestClient(app).post("/webhook", content=b'{"version": "4"}')

        assert resp.status_code == 500
        store.index_document.assert_not_called()
        assert _counts(registry) == {"received": 1.0, "invalid": 1.0, "successful": 0.0}

    def test_received_covers_every_outcome(self, client, store, registry):
        client.post("/webhook", content=b'{"version": "4"}')
        client.post("/webhook", content=b"")
        client.post("/webhook", content=b'{"version": "2"}')
        store.index_document.side_effect = StoreWriteError("down")
        client.post("/webhook", content=b'{"version": "4"}')

        counts = _counts(registry)
        assert counts == {"received": 4.0, "invalid": 3.0, "successful": 1.0}
        assert counts["received"] >= counts["invalid"] + counts["successful"]

    def test_get_not_allowed(self, client, registry):
        assert client.get("/webhook").status_code == 405
        assert _count(registry, "received") == 0.0


class TestHealthz:
    def test_ok(self, client):
        resp = client.get("/healthz")
        assert resp.status_code == 200
        assert resp.text == "Ok"

    def test_independent_of_store(self, client, store):
        store.index_document.side_effect = StoreWriteError("unreachable")
        resp = client.get("/healthz")
        assert resp.status_code == 200
        store.index_document.assert_not_called()


class TestMetrics:
    def test_exposes_counters(self, client):
        client.post("/webhook", content=b'{"version": "4"}')
        resp = client.get("/metrics")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert "alertmanager2es_alerts_received_total 1.0" in resp.text
        assert "alertmanager2es_alerts_successful_total 1.0" in resp.text
        assert "alertmanager2es_alerts_invalid_total 0.0" in resp.text
