"""
Tests for service endpoints and the error mapping.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    response = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Response-Time"].endswith("ms")


@pytest.mark.asyncio
async def test_metrics_exposes_write_counters(client: AsyncClient, test_event):
    await client.post("/api/v1/bookings/", json={"event_id": 424242, "email": "a@b.co"})

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert 'booking_writes_total{result="missing_event"}' in response.text
