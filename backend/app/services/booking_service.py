"""
Booking service.

A booking is a single validated write: the validator hook checks the email
and awaits the referenced-event lookup before the gateway commits. The
Event row is only read, never updated.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.schemas.booking import BookingCreate
from app.services.booking_validator import booking_pre_commit
from app.services.interfaces.persistence import PendingWrite, PersistenceGateway
from app.core.errors import ReferencedEventNotFoundError, ValidationError
from app.core.metrics import record_booking_write
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_booking(gateway: PersistenceGateway, booking_data: BookingCreate) -> Booking:
    write = PendingWrite.insert(booking_data.model_dump())
    try:
        booking = await gateway.save(Booking, write, booking_pre_commit(gateway.exists_by_id))
    except ReferencedEventNotFoundError:
        record_booking_write("missing_event")
        raise
    except ValidationError:
        record_booking_write("invalid")
        raise

    record_booking_write("committed")
    logger.info("booking_created", booking_id=booking.id, event_id=booking.event_id)
    return booking


async def list_bookings(db: AsyncSession, event_id: Optional[int] = None) -> list[Booking]:
    """All bookings, newest first; filtering by event uses ix_bookings_event_id."""
    query = select(Booking)
    if event_id is not None:
        query = query.where(Booking.event_id == event_id)
    result = await db.execute(query.order_by(Booking.created_at.desc(), Booking.id.desc()))
    return list(result.scalars().all())
