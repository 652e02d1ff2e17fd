"""
Booking validator: the pre-commit hook for Booking writes.

Checks, in order:
  1. an event reference is present
  2. the email has a local@domain shape (re-checked here even though the
     request schema already coerced and validated it)
  3. the referenced Event exists - the only check that awaits the store

If the write is cancelled while the lookup is outstanding, CancelledError
propagates out of the hook and the gateway never commits.
"""

import re
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from app.core.errors import ReferencedEventNotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.metrics import event_lookup_latency
from app.core.result import Failure, Result, Success
from app.services.interfaces.persistence import PendingWrite

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

EventExists = Callable[[Any], Awaitable[bool]]


@dataclass(frozen=True)
class BookingRecord:
    event_id: int
    email: str

    def to_columns(self) -> dict:
        return {"event_id": self.event_id, "email": self.email}


def coerce_email(value: Any) -> str:
    """Trim + lowercase, then check the local@domain shape."""
    email = value.strip().lower() if isinstance(value, str) else ""
    if not EMAIL_PATTERN.fullmatch(email):
        raise ValidationError("Invalid email format", field="email")
    return email


def require_event_reference(value: Any) -> Any:
    if value is None or value == "":
        raise ValidationError("eventId is required", field="event_id")
    return value


async def validate_booking(
    write: PendingWrite,
    exists_by_id: EventExists,
) -> Result[BookingRecord, ValidationError]:
    """Validating factory for BookingRecord."""
    try:
        event_id = require_event_reference(write.get("event_id"))
        email = coerce_email(write.get("email"))
    except ValidationError as e:
        return Failure(e)

    started = time.perf_counter()
    exists = await exists_by_id(event_id)
    event_lookup_latency.observe(time.perf_counter() - started)

    if not exists:
        logger.info("booking_event_missing", event_id=event_id)
        return Failure(ReferencedEventNotFoundError(event_id))

    return Success(BookingRecord(event_id=event_id, email=email))


def booking_pre_commit(exists_by_id: EventExists):
    """Bind the existence lookup and return a gateway hook."""

    async def hook(write: PendingWrite) -> Result[BookingRecord, ValidationError]:
        return await validate_booking(write, exists_by_id)

    return hook
