"""
Booking model: an email address registered for an event.

Key design decisions:
- `event_id` is a plain reference to events.id (no ownership, no cascade);
  existence is checked by the pre-commit hook before every write
- Non-unique index on `event_id` for per-event listings
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    email = Column(String(320), nullable=False)

    event = relationship("Event", back_populates="bookings", lazy="noload")

    __table_args__ = (
        Index("ix_bookings_event_id", "event_id"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, event={self.event_id}, email={self.email})>"
