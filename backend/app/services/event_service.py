"""
Event service: create, update and read Events.

Writes go through the gateway with the normalizer as pre-commit hook;
reads query the session directly.
"""

import json
from typing import Optional

from sqlalchemy import select, func, cast, String
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.event import Event
from app.schemas.event import EventCreate, EventUpdate
from app.services.event_normalizer import REQUIRED_STRING_FIELDS, event_pre_commit
from app.services.interfaces.persistence import PendingWrite, PersistenceGateway
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.metrics import record_event_write
from app.core.logging import get_logger

logger = get_logger(__name__)

EVENT_FIELDS = REQUIRED_STRING_FIELDS + ("date", "time", "agenda", "tags")


def stored_fields(event: Event) -> dict:
    fields = {name: getattr(event, name) for name in EVENT_FIELDS}
    fields["slug"] = event.slug
    return fields


async def _save(gateway: PersistenceGateway, write: PendingWrite, instance: Optional[Event] = None) -> Event:
    try:
        event = await gateway.save(Event, write, event_pre_commit, instance=instance)
    except ValidationError:
        record_event_write("invalid")
        raise
    except ConflictError:
        record_event_write("conflict")
        raise
    record_event_write("committed")
    return event


async def create_event(gateway: PersistenceGateway, event_data: EventCreate) -> Event:
    """Create an Event; the slug is derived from the title."""
    event = await _save(gateway, PendingWrite.insert(event_data.model_dump()))
    logger.info("event_created", event_id=event.id, slug=event.slug)
    return event


async def update_event(gateway: PersistenceGateway, event: Event, changes: EventUpdate) -> Event:
    """
    Apply a partial update.
    Only fields whose submitted value differs from the stored one count as
    modified, so re-sending the same title keeps the existing slug.
    """
    current = stored_fields(event)
    submitted = changes.model_dump(exclude_unset=True)
    modified = frozenset(name for name, value in submitted.items() if value != current.get(name))

    write = PendingWrite(fields={**current, **submitted}, modified=modified, is_new=False)
    previous_slug = current["slug"]
    event = await _save(gateway, write, instance=event)

    logger.info(
        "event_updated",
        event_id=event.id,
        slug=event.slug,
        previous_slug=previous_slug,
        modified=sorted(modified),
    )
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()
    if not event:
        raise NotFoundError("Event", event_id)
    return event


async def get_event_by_slug(db: AsyncSession, slug: str) -> Event:
    """Uses the unique ix_events_slug index."""
    result = await db.execute(select(Event).where(Event.slug == slug))
    event = result.scalar_one_or_none()
    if not event:
        raise NotFoundError("Event", slug)
    return event


def _tag_filter(tag: str):
    # Tags are stored as a JSON list of lowercased strings; match the quoted element
    needle = json.dumps(tag.strip().lower())
    needle = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return cast(Event.tags, String).like(f"%{needle}%", escape="\\")


async def list_events(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    tag: Optional[str] = None,
) -> tuple[list[Event], int]:
    """List events ordered by date then time, optionally filtered by tag."""
    query = select(Event)
    if tag:
        query = query.where(_tag_filter(tag))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(Event.date.asc(), Event.time.asc(), Event.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total
