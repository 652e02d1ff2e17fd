"""
Event endpoints. Listings are cached in Redis; every committed write
invalidates the cached pages.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_cache, get_gateway
from app.db.gateway import SqlAlchemyGateway
from app.db.session import get_db
from app.schemas.event import EventCreate, EventUpdate, EventResponse, EventListResponse
from app.services.cache_service import EventListCache
from app.services.event_service import create_event, update_event, get_event_by_slug, list_events
from app.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    gateway: SqlAlchemyGateway = Depends(get_gateway),
    cache: EventListCache = Depends(get_cache),
):
    """
    Create an event. The slug is derived from the title; a title whose slug
    is already taken returns 409.
    """
    event = await create_event(gateway, event_data)
    await cache.invalidate()
    return event


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    tag: Optional[str] = Query(None, min_length=1, max_length=100),
    db: AsyncSession = Depends(get_db),
    cache: EventListCache = Depends(get_cache),
):
    """List events ordered by date and time, optionally filtered by tag."""
    cached = await cache.get_list(page, page_size, tag)
    if cached:
        logger.info("events_list_cache_hit", page=page, tag=tag)
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total = await list_events(db, page, page_size, tag)

    response_data = {
        "events": [EventResponse.model_validate(e).model_dump() for e in events],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }
    await cache.set_list(page, page_size, tag, response_data)

    return EventListResponse(**response_data)


@router.get("/{slug}", response_model=EventResponse)
async def get_event_endpoint(
    slug: str,
    db: AsyncSession = Depends(get_db),
):
    return await get_event_by_slug(db, slug)


@router.patch("/{slug}", response_model=EventResponse)
async def update_event_endpoint(
    slug: str,
    changes: EventUpdate,
    gateway: SqlAlchemyGateway = Depends(get_gateway),
    cache: EventListCache = Depends(get_cache),
):
    """
    Partially update an event. Changing the title regenerates the slug, so
    the event may move to a new URL; re-sending the same title does not.
    """
    event = await get_event_by_slug(gateway.db, slug)
    event = await update_event(gateway, event, changes)
    await cache.invalidate()
    return event
