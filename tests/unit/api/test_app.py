"""Tests for application wiring: health, prices, headers and error rendering."""

from unittest.mock import patch

from fastapi.testclient import TestClient

from src.luxgold.api.http.app import app, shutdown, startup
from src.luxgold.api.http.errors import GENERIC_SERVER_ERROR
from src.luxgold.runtime.config.config_data import AppConfig, ConfigData, DatabaseConfig
from src.luxgold.runtime.context import with_context


class TestHealth:
    """Test the health endpoints."""

    def test_liveness(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "healthy"

    def test_database(self, client):
        response = client.get("/api/health/db")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"]["type"] in ("sqlite", "postgresql")
        assert "pool" in body

    def test_database_unreachable(self, client, db_service):
        with patch.object(db_service, "health_check", return_value=False):
            response = client.get("/api/health/db")
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestGoldPrices:
    """Test GET /api/gold-prices."""

    def test_simulated_prices(self, client):
        response = client.get("/api/gold-prices")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["is_live"] is False
        assert body["data"]["gold18k"]["unit"] == "تومان/گرم"
        assert response.headers["cache-control"].startswith("public")


class TestMiddleware:
    """Test headers added to every response."""

    def test_security_headers(self, client):
        response = client.get("/api/health")
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "SAMEORIGIN"
        assert response.headers["cache-control"] == "no-store"
        assert "strict-transport-security" not in response.headers

    def test_request_id_echo(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["x-request-id"] == "req-123"

    def test_request_id_generated(self, client):
        assert client.get("/api/health").headers["x-request-id"]


class TestErrorRendering:
    """Test how unexpected failures are reported."""

    def test_unhandled_error_outside_production(self, client, db_service):
        with patch.object(db_service, "get_pool_status", side_effect=RuntimeError("pool exploded")):
            response = client.get("/api/health/db")
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "pool exploded"
        assert body["code"] == "internal_error"
        assert body["request_id"] == response.headers["x-request-id"]

    def test_unhandled_error_in_production(self, client, db_service):
        production = ConfigData(app=AppConfig(environment="production"))
        with patch("src.luxgold.api.http.errors.get_config", return_value=production):
            with patch.object(db_service, "get_pool_status", side_effect=RuntimeError("secret detail")):
                response = client.get("/api/health/db")
        assert response.status_code == 500
        assert response.json()["error"] == GENERIC_SERVER_ERROR


class TestLifespan:
    """Test startup and shutdown hooks."""

    async def test_startup_builds_dependencies(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'catalog.db'}"
        previous = getattr(app.state, "app_dependencies", None)
        try:
            with with_context(ConfigData(database=DatabaseConfig(url=url))):
                await startup()
                deps = app.state.app_dependencies
                assert deps.database_service.health_check()
                await shutdown()
        finally:
            app.state.app_dependencies = previous

    def test_lifespan_with_client(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'catalog.db'}"
        previous = getattr(app.state, "app_dependencies", None)
        try:
            config = ConfigData(database=DatabaseConfig(url=url))
            with patch("src.luxgold.core.services.database.db_session.get_config", return_value=config):
                with TestClient(app) as client:
                    assert client.get("/api/health/db").status_code == 200
        finally:
            app.state.app_dependencies = previous
