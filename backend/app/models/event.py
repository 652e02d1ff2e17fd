"""
Event model: the listing shown to visitors and referenced by bookings.

Key design decisions:
- `slug` carries a unique index; a duplicate surfaces as IntegrityError at
  flush time and is translated to ConflictError by the gateway
- `date` / `time` are stored as canonical strings (YYYY-MM-DD, HH:mm), so the
  stored form is exactly what the normalizer produced
- `agenda` / `tags` are ordered JSON lists
"""

from sqlalchemy import Column, Integer, String, Text, JSON, Index
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    overview = Column(Text, nullable=False)
    image = Column(String(1024), nullable=False)
    venue = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    date = Column(String(10), nullable=False)
    time = Column(String(5), nullable=False)
    mode = Column(String(50), nullable=False)
    audience = Column(String(255), nullable=False)
    agenda = Column(JSON, nullable=False)
    organizer = Column(String(255), nullable=False)
    tags = Column(JSON, nullable=False)

    # Reference only: bookings are never loaded or cascaded through the event
    bookings = relationship("Booking", back_populates="event", lazy="noload", passive_deletes=True)

    __table_args__ = (
        Index("ix_events_slug", "slug", unique=True),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, slug={self.slug}, date={self.date})>"
