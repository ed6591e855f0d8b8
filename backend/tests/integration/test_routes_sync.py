"""
Integration tests for sync routes.

Tests POST /api/v1/sync/run, POST /api/v1/sync/drain, GET /api/v1/sync/status
and DELETE /api/v1/sync/queue with the orchestrator and Celery mocked.
Version: 1.0.0
"""
import pytest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from stock_sync.core.exceptions import ConfigurationError, QueueStoreError
from stock_sync.schemas.sync import QueueCounts, SyncStatusResponse


@pytest.fixture
def orchestrator():
    return MagicMock()


@pytest.fixture
def client(orchestrator):
    """Test client with the orchestrator dependency overridden."""
    with patch("stock_sync.container.get_queue_store", return_value=MagicMock()):
        from stock_sync.main import app
        from stock_sync.container import get_sync_orchestrator

        app.dependency_overrides[get_sync_orchestrator] = lambda: orchestrator
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c
        app.dependency_overrides.clear()


@pytest.mark.integration
class TestTriggers:

    def test_run_queues_full_sync(self, client):
        with patch("stock_sync.celery_app.tasks.sync.run_full_sync.delay") as mock_delay:
            mock_delay.return_value = MagicMock(id="task-123")
            response = client.post("/api/v1/sync/run")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "queued"
        assert body["task_id"] == "task-123"
        mock_delay.assert_called_once_with(triggered_by="operator")

    def test_drain_queues_forced_tick(self, client):
        with patch("stock_sync.celery_app.tasks.sync.drain_tick.delay") as mock_delay:
            mock_delay.return_value = MagicMock(id="task-456")
            response = client.post("/api/v1/sync/drain")

        assert response.status_code == 200
        assert response.json()["task_id"] == "task-456"
        mock_delay.assert_called_once_with(force=True)

    def test_broker_failure_is_500(self, client):
        with patch("stock_sync.celery_app.tasks.sync.run_full_sync.delay", side_effect=OSError("broker down")):
            response = client.post("/api/v1/sync/run")

        assert response.status_code == 500


@pytest.mark.integration
class TestStatus:

    def test_returns_counters_and_queue(self, client, orchestrator):
        orchestrator.get_status.return_value = SyncStatusResponse(
            synced_count=12,
            error_count=1,
            not_found_count=4,
            last_sync_timestamp="2026-01-05T12:00:00+00:00",
            queue=QueueCounts(pending=2, processing=0, completed=1, error=0),
            drain_registered=True,
            sync_enabled=True,
        )

        response = client.get("/api/v1/sync/status")

        assert response.status_code == 200
        body = response.json()
        assert body["synced_count"] == 12
        assert body["not_found_count"] == 4
        assert body["queue"]["pending"] == 2
        assert body["drain_registered"] is True

    def test_queue_store_failure_is_502(self, client, orchestrator):
        orchestrator.get_status.side_effect = QueueStoreError("connection reset")

        response = client.get("/api/v1/sync/status")

        assert response.status_code == 502

    def test_configuration_error_is_400(self, client, orchestrator):
        orchestrator.get_status.side_effect = ConfigurationError("SUPABASE_URL missing")

        response = client.get("/api/v1/sync/status")

        assert response.status_code == 400
        assert "SUPABASE_URL" in response.json()["detail"]


@pytest.mark.integration
class TestClearQueue:

    def test_deletes_pending(self, client, orchestrator):
        orchestrator.clear_queue.return_value = 3

        response = client.delete("/api/v1/sync/queue")

        assert response.status_code == 200
        assert response.json()["deleted"] == 3
