"""
Tests for the Tenement Sync API
"""
import pytest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.tenement_sync.api.dependencies import get_db
from src.tenement_sync.api.main import create_app
from src.tenement_sync.db.repository import SyncRunRepository
from src.tenement_sync.etl.upserter import BatchUpserter
from src.tenement_sync.exceptions import SourceUnavailableError
from src.tenement_sync.models.tenement import Jurisdiction
from src.tenement_sync.scrapers.placeholder_generator import PROFILES, PlaceholderGenerator
from src.tenement_sync.sources.live import LiveAPISource
from src.tenement_sync.sources.placeholder import PlaceholderSource
from src.tenement_sync.sync.progress_store import InMemoryProgressStore
from src.tenement_sync.sync.registry import SyncService


def placeholder(jurisdiction, count):
    return PlaceholderSource(PlaceholderGenerator(PROFILES[jurisdiction], target_count=count, seed=9), batch_size=10)


@pytest.fixture
def service(session_factory):
    scraper = MagicMock()
    scraper.base_url = "https://example.com/query"
    scraper.fetch_count.side_effect = SourceUnavailableError("WA Government API unavailable")
    sources = {
        Jurisdiction.WA: LiveAPISource(scraper, batch_size=500),
        Jurisdiction.NT: placeholder(Jurisdiction.NT, 25),
        Jurisdiction.TAS: placeholder(Jurisdiction.TAS, 12),
    }
    return SyncService(
        sources=sources,
        upserter=BatchUpserter(session_factory=session_factory, retry_delay=0),
        progress_store=InMemoryProgressStore(),
        run_repository=SyncRunRepository(),
    )


@pytest.fixture
def client(service, test_db):
    app = create_app(service)

    def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client


class TestSyncEndpoints:
    """Tests for POST /sync."""

    def test_sync_jurisdiction(self, client):
        response = client.post("/sync/tas")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["imported"] == 12
        assert body["errors"] == []
        assert body["jurisdiction"] == "TAS"
        assert body["timestamp"].endswith("Z")

    def test_failed_sync_returns_500(self, client):
        response = client.post("/sync/WA")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["errors"] == ["WA Government API unavailable"]
        assert body["message"] == "Failed to sync WA data"

    def test_unknown_jurisdiction(self, client):
        response = client.post("/sync/SA")

        assert response.status_code == 404
        assert response.json()["detail"] == "Unknown jurisdiction: SA"

    def test_unconfigured_jurisdiction(self, client):
        assert client.post("/sync/QLD").status_code == 404

    def test_sync_in_progress(self, client, service):
        orchestrator = service.orchestrator("NT")
        orchestrator._guard.acquire()
        try:
            response = client.post("/sync/NT")
        finally:
            orchestrator._guard.release()

        assert response.status_code == 409
        assert "already in progress" in response.json()["detail"]

    def test_sync_all(self, client):
        response = client.post("/sync/all")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["totalImported"] == 37
        assert body["successfulSyncs"] == 2
        assert body["totalJurisdictions"] == 3
        assert [r["jurisdiction"] for r in body["results"]] == ["WA", "NT", "TAS"]
        assert body["results"][0]["success"] is False

    def test_cancel_without_active_run(self, client):
        response = client.post("/sync/NT/cancel")

        assert response.status_code == 200
        assert response.json() == {"success": False, "jurisdiction": "NT", "message": "No sync in progress"}

    def test_cancel_all_without_active_run(self, client):
        response = client.post("/sync/all/cancel")

        assert response.status_code == 200
        assert response.json()["success"] is False


class TestProgressEndpoints:
    """Tests for /sync-progress."""

    def test_idle_default(self, client):
        response = client.get("/sync-progress/WA")

        assert response.status_code == 200
        assert response.json() == {
            "status": "idle",
            "progress": 0,
            "currentRecord": 0,
            "totalRecords": 0,
            "message": "Ready to sync",
            "startTime": 0,
        }

    def test_progress_after_sync(self, client):
        client.post("/sync/TAS")

        body = client.get("/sync-progress/tas").json()

        assert body["status"] == "completed"
        assert body["progress"] == 100
        assert body["currentRecord"] == 12
        assert body["totalRecords"] == 12
        assert "estimatedTimeRemaining" not in body

    def test_progress_after_failure(self, client):
        client.post("/sync/WA")

        body = client.get("/sync-progress/WA").json()

        assert body["status"] == "error"
        assert body["message"] == "Sync failed: WA Government API unavailable"

    def test_publish(self, client):
        response = client.post(
            "/sync-progress/VIC",
            json={"status": "syncing", "progress": 25, "currentRecord": 100, "totalRecords": 400, "message": "Synced 100/400 records"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}

        body = client.get("/sync-progress/VIC").json()
        assert body["status"] == "syncing"
        assert body["currentRecord"] == 100
        assert body["startTime"] > 0

    def test_publish_invalid_payload(self, client):
        response = client.post("/sync-progress/VIC", json={"status": "bogus"})

        assert response.status_code == 422

    def test_unknown_jurisdiction(self, client):
        assert client.get("/sync-progress/XX").status_code == 404
        assert client.post("/sync-progress/XX", json={"status": "idle"}).status_code == 404


class TestDataSourcesEndpoint:
    def test_list_data_sources(self, client):
        client.post("/sync/TAS")

        response = client.get("/data-sources")

        assert response.status_code == 200
        body = response.json()
        assert body["total_tenements"] == 12
        assert [s["jurisdiction"] for s in body["sources"]] == ["WA", "NT", "TAS"]

        tas = body["sources"][2]
        assert tas["type"] == "placeholder"
        assert tas["tenement_count"] == 12
        assert tas["sync_status"] == "completed"
        assert tas["last_sync"]["status"] == "success"

        nt = body["sources"][1]
        assert nt["tenement_count"] == 0
        assert nt["sync_status"] == "idle"
        assert nt["last_sync"] is None


class TestSyncRunsEndpoint:
    def test_list_runs(self, client):
        client.post("/sync/TAS")
        client.post("/sync/WA")

        runs = client.get("/sync-runs").json()
        assert len(runs) == 2
        assert {run["status"] for run in runs} == {"success", "failure"}

        wa_runs = client.get("/sync-runs", params={"jurisdiction": "wa"}).json()
        assert len(wa_runs) == 1
        assert wa_runs[0]["error_message"] == "WA Government API unavailable"

    def test_limit_validation(self, client):
        assert client.get("/sync-runs", params={"limit": 0}).status_code == 422

    def test_unknown_jurisdiction(self, client):
        assert client.get("/sync-runs", params={"jurisdiction": "SA"}).status_code == 404


class TestHealthEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    def test_health_degraded(self, service):
        app = create_app(service)
        db = MagicMock()
        db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))

        def override_get_db():
            yield db

        app.dependency_overrides[get_db] = override_get_db
        with TestClient(app) as test_client:
            body = test_client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["database"] == "error"

    @patch('src.tenement_sync.api.main.close_connections')
    def test_shutdown_closes_database_connections(self, mock_close, service):
        with TestClient(create_app(service)):
            mock_close.assert_not_called()

        mock_close.assert_called_once()

    def test_root(self, client):
        body = client.get("/").json()

        assert body["name"] == "Tenement Sync API"
        assert body["jurisdictions"] == ["WA", "NT", "TAS"]
