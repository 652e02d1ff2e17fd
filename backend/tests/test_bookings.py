"""
Tests for booking endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_booking(client: AsyncClient, test_event):
    """Email is trimmed and lowercased before it is stored."""
    response = await client.post(
        "/api/v1/bookings/",
        json={"event_id": test_event.id, "email": "  Guest@Example.COM "},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["event_id"] == test_event.id
    assert data["email"] == "guest@example.com"


@pytest.mark.asyncio
async def test_book_nonexistent_event(client: AsyncClient):
    response = await client.post(
        "/api/v1/bookings/",
        json={"event_id": 99999, "email": "guest@example.com"},
    )
    assert response.status_code == 422
    data = response.json()
    assert data["detail"] == "Referenced event does not exist"
    assert data["code"] == "referenced_event_missing"

    listing = await client.get("/api/v1/bookings/")
    assert listing.json() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("email", ["not-an-email", "a@b", "two@@example.com", "sp ace@example.com"])
async def test_book_invalid_email(client: AsyncClient, test_event, email):
    response = await client.post(
        "/api/v1/bookings/",
        json={"event_id": test_event.id, "email": email},
    )
    assert response.status_code == 422
    assert response.json() == {"detail": "Invalid email format", "field": "email", "code": "validation_failed"}


@pytest.mark.asyncio
async def test_book_without_event_id(client: AsyncClient):
    response = await client.post("/api/v1/bookings/", json={"email": "guest@example.com"})
    assert response.status_code == 422
    assert response.json()["detail"] == "eventId is required"
    assert response.json()["field"] == "event_id"


@pytest.mark.asyncio
async def test_booking_does_not_touch_event(client: AsyncClient, test_event):
    before = (await client.get("/api/v1/events/test-concert")).json()

    await client.post("/api/v1/bookings/", json={"event_id": test_event.id, "email": "a@b.co"})

    after = (await client.get("/api/v1/events/test-concert")).json()
    assert after == before


@pytest.mark.asyncio
async def test_list_bookings_for_event(client: AsyncClient, test_event):
    other = await client.post("/api/v1/events/", json={
        "title": "Other Event", "description": "d", "overview": "o", "image": "/i.png",
        "venue": "v", "location": "l", "date": "2027-07-01", "time": "18:00",
        "mode": "online", "audience": "all", "agenda": ["a"], "organizer": "org",
        "tags": ["misc"],
    })
    other_id = other.json()["id"]

    await client.post("/api/v1/bookings/", json={"event_id": test_event.id, "email": "one@example.com"})
    await client.post("/api/v1/bookings/", json={"event_id": test_event.id, "email": "two@example.com"})
    await client.post("/api/v1/bookings/", json={"event_id": other_id, "email": "three@example.com"})

    response = await client.get(f"/api/v1/bookings/?event_id={test_event.id}")
    assert response.status_code == 200
    data = response.json()
    assert sorted(b["email"] for b in data) == ["one@example.com", "two@example.com"]

    everything = await client.get("/api/v1/bookings/")
    assert len(everything.json()) == 3
