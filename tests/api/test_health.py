"""Liveness, readiness and version probes."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """GET /health returns 200 with healthy status."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_readiness_memory_backend(client: AsyncClient) -> None:
    """GET /ready checks storage only when Redis is not configured."""
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"storage": "ok"}


@pytest.mark.asyncio
async def test_version(client: AsyncClient) -> None:
    response = await client.get("/version")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == "0.1.0"
    assert data["storage"] == "memory"
    assert "environment" in data


class _BrokenStorage:
    async def ping(self) -> None:
        raise ConnectionError("database is gone")


@pytest.mark.asyncio
async def test_readiness_degraded_when_storage_fails(app, client: AsyncClient) -> None:
    app.state.storage = _BrokenStorage()
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["storage"] == "error: database is gone"


@pytest.mark.asyncio
async def test_health_carries_request_id(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-Id": "probe-7"})
    assert response.headers["x-request-id"] == "probe-7"
