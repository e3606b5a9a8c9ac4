"""Tests for the /health endpoint."""
from fastapi.testclient import TestClient


def test_health_when_store_connected(api_client: TestClient) -> None:
    response = api_client.get("/health")
    data = response.json()

    assert response.status_code == 200
    assert data["status"] == "healthy"
    assert data["database"] == "connected"
    assert data["timestamp"]


def test_health_when_store_unreachable(api_client: TestClient, client_factory) -> None:
    client_factory.available = False
    response = api_client.get("/health")

    assert response.status_code == 503
    assert response.json()["database"] == "disconnected"


def test_unknown_route_is_404(api_client: TestClient) -> None:
    response = api_client.get("/api/v1/nothing-here")
    assert response.status_code == 404
    assert "error" in response.json()
