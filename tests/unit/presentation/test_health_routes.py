"""
Tests for the health check API.
"""

import httpx
import pytest

from conftest import FakeDatabase
from dating_service.main import DatingServiceApp


@pytest.fixture
def make_client(settings, make_container, events):
    def _make(healthy: bool = True):
        container = make_container(database=FakeDatabase(events, healthy=healthy))
        service = DatingServiceApp(settings, container=container)
        transport = httpx.ASGITransport(app=service.app)
        client = httpx.AsyncClient(transport=transport, base_url="http://test")
        return service, client

    return _make


class TestHealthRoutes:
    async def test_healthy(self, make_client, settings):
        _, client = make_client()

        async with client:
            response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == settings.APP_NAME
        assert data["components"]["database"]["status"] == "healthy"
        assert data["components"]["lifecycle"]["state"] == "running"

    async def test_database_down_is_degraded(self, make_client):
        _, client = make_client(healthy=False)

        async with client:
            response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["components"]["database"]["status"] == "unhealthy"

    async def test_shutting_down(self, make_client):
        service, client = make_client()
        service.shutdown_manager.initiate_shutdown("SIGTERM")

        async with client:
            response = await client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "shutting_down"
        assert data["components"]["lifecycle"]["shutdown_reason"] == "SIGTERM"

    async def test_root(self, make_client, settings):
        _, client = make_client()

        async with client:
            response = await client.get("/")

        assert response.status_code == 200
        assert response.json() == {
            "service": settings.APP_NAME,
            "status": "running",
            "version": settings.APP_VERSION,
        }
