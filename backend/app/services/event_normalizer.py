"""
Event normalizer: the pre-commit hook for Event writes.

Pipeline (fail-fast, first violation wins):
  1. required strings are present and trimmed
  2. date -> YYYY-MM-DD
  3. time -> HH:mm (24h)
  4. slug derived from title when the title changed or no slug exists
  5. agenda / tags are non-empty lists of non-empty strings

The helpers below are also used by the request schemas, so the field-level
checks and the pre-commit checks share one rule set.

Date policy: an input carrying a UTC offset is converted to UTC and its UTC
calendar day is stored; a naive input is read as a UTC calendar date as-is.
The end user's timezone is never guessed. The year and month must be written
out; a missing day reads as the 1st ("March 2024" -> 2024-03-01), and nothing
is ever filled in from the current date.

The normalizer holds no state and never mutates the pending write; it is
safe to run concurrently for different documents. Slug uniqueness is not
checked here - the store's unique index reports collisions at commit.
"""

import re
import unicodedata
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from dateutil import parser as date_parser

from app.core.errors import ValidationError
from app.core.result import Failure, Result, Success
from app.services.interfaces.persistence import PendingWrite

REQUIRED_STRING_FIELDS = (
    "title",
    "description",
    "overview",
    "image",
    "venue",
    "location",
    "mode",
    "audience",
    "organizer",
)

_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")
_TIME_PATTERN = re.compile(r"^(\d{1,2})(?::(\d{1,2}))?\s*(AM|PM)?$", re.IGNORECASE | re.ASCII)

# Two fill-ins that differ in year and month but agree on the day
_DATE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 1))


@dataclass(frozen=True)
class EventRecord:
    """A fully normalized Event, ready to be written."""

    title: str
    slug: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: str
    audience: str
    agenda: tuple[str, ...]
    organizer: str
    tags: tuple[str, ...]

    def to_columns(self) -> dict:
        return {
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "overview": self.overview,
            "image": self.image,
            "venue": self.venue,
            "location": self.location,
            "date": self.date,
            "time": self.time,
            "mode": self.mode,
            "audience": self.audience,
            "agenda": list(self.agenda),
            "organizer": self.organizer,
            "tags": list(self.tags),
        }


def _is_non_empty(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def require_string(name: str, value: Any) -> str:
    if not _is_non_empty(value):
        raise ValidationError(f"{name} is required and must be non-empty", field=name)
    return value.strip()


def to_slug(raw: str) -> str:
    """Lowercase, ASCII, hyphen-separated form of `raw`.

    >>> to_slug("  Café Night: Jazz & Wine!  ")
    'cafe-night-jazz-wine'
    """
    decomposed = unicodedata.normalize("NFKD", raw)
    stripped = _COMBINING_MARKS.sub("", decomposed)
    return _NON_ALNUM_RUN.sub("-", stripped.lower().strip()).strip("-")


def normalize_date(value: Any) -> str:
    """Parse any reasonable date spelling and return the UTC calendar day."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed, other = (date_parser.parse(text, default=fill) for fill in _DATE_DEFAULTS)
        except (ValueError, OverflowError):
            raise ValidationError("Invalid date format", field="date")
        # Any difference came from the fill-ins: the input has no year or month
        if (parsed.year, parsed.month) != (other.year, other.month):
            raise ValidationError("Invalid date format", field="date")
    else:
        raise ValidationError("Invalid date format", field="date")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def normalize_time(value: Any) -> str:
    """'2pm' -> '14:00', '12am' -> '00:00', '9:05 AM' -> '09:05'."""
    match = _TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValidationError("Invalid time format", field="time")

    hour = int(match.group(1))
    minute = int(match.group(2)) if match.group(2) else 0
    meridiem = match.group(3).upper() if match.group(3) else None

    if meridiem == "PM" and hour < 12:
        hour += 12
    if meridiem == "AM" and hour == 12:
        hour = 0
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValidationError("Invalid time range", field="time")

    return f"{hour:02d}:{minute:02d}"


def require_date(value: Any) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("date is required and must be non-empty", field="date")
    return normalize_date(value)


def require_time(value: Any) -> str:
    if not _is_non_empty(value):
        raise ValidationError("time is required and must be non-empty", field="time")
    return normalize_time(value)


def _normalize_string_list(value: Any, name: str, label: str) -> list:
    if (
        not isinstance(value, (list, tuple))
        or not value
        or not all(_is_non_empty(item) for item in value)
    ):
        raise ValidationError(f"{label} must be a non-empty array of non-empty strings", field=name)
    return [item.strip() for item in value]


def normalize_agenda(value: Any) -> list:
    return _normalize_string_list(value, "agenda", "Agenda")


def normalize_tags(value: Any) -> list:
    return [tag.lower() for tag in _normalize_string_list(value, "tags", "Tags")]


def _derive_slug(write: PendingWrite, title: str) -> str:
    current = write.get("slug")
    if not write.is_modified("title") and _is_non_empty(current):
        return current

    slug = to_slug(title)
    if not slug:
        raise ValidationError("title must contain at least one letter or digit", field="title")
    return slug


def _normalize(write: PendingWrite) -> EventRecord:
    values = {name: require_string(name, write.get(name)) for name in REQUIRED_STRING_FIELDS}

    values["date"] = require_date(write.get("date"))
    values["time"] = require_time(write.get("time"))
    values["slug"] = _derive_slug(write, values["title"])
    values["agenda"] = tuple(normalize_agenda(write.get("agenda")))
    values["tags"] = tuple(normalize_tags(write.get("tags")))
    return EventRecord(**values)


def normalize_event(write: PendingWrite) -> Result[EventRecord, ValidationError]:
    """Validating factory for EventRecord."""
    try:
        return Success(_normalize(write))
    except ValidationError as e:
        return Failure(e)


async def event_pre_commit(write: PendingWrite) -> Result[EventRecord, ValidationError]:
    """Gateway hook wrapper; Event normalization never suspends."""
    return normalize_event(write)
