"""Test health check endpoints."""

from unittest.mock import patch

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["service"] == "mediavault"
    assert data["storage_ready"] is True
    assert "version" in data


@pytest.mark.asyncio
async def test_health_before_init(client: AsyncClient):
    with patch(
        "mediavault.api.routes.health.get_local_store",
        side_effect=RuntimeError("Services not initialized"),
    ):
        resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["storage_ready"] is False


@pytest.mark.asyncio
async def test_ping(client: AsyncClient):
    resp = await client.get("/api/ping")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
