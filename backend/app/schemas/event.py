"""
Pydantic schemas for event-related request/response validation.

This is the field-level coercion layer. Every incoming field runs through
the same rule the pre-commit normalizer applies again before the write, so
a bad value gets the same message from either layer. Fields are declared in
the order the normalizer checks them; the first error reported matches.
"""

from datetime import datetime
from functools import partial
from typing import ClassVar, Optional
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.core.errors import ValidationError
from app.services.event_normalizer import (
    REQUIRED_STRING_FIELDS,
    normalize_agenda,
    normalize_tags,
    require_date,
    require_string,
    require_time,
)

_FIELD_RULES = {name: partial(require_string, name) for name in REQUIRED_STRING_FIELDS}
_FIELD_RULES.update(
    date=require_date,
    time=require_time,
    agenda=normalize_agenda,
    tags=normalize_tags,
)


class _EventFields(BaseModel):
    model_config = {"str_strip_whitespace": True}

    # Partial updates leave unsent fields as None
    allow_missing: ClassVar[bool] = False

    @field_validator(*_FIELD_RULES, mode="before", check_fields=False)
    @classmethod
    def _write_rules(cls, v, info: ValidationInfo):
        if v is None and cls.allow_missing:
            return v
        try:
            return _FIELD_RULES[info.field_name](v)
        except ValidationError as e:
            # Field validators must raise ValueError for pydantic to report them
            raise ValueError(e.message) from None


class EventCreate(_EventFields):
    # Defaults are validated, so an omitted field fails with the rule's message
    title: str = Field(None, max_length=255, validate_default=True)
    description: str = Field(None, validate_default=True)
    overview: str = Field(None, validate_default=True)
    image: str = Field(None, max_length=1024, validate_default=True)
    venue: str = Field(None, max_length=255, validate_default=True)
    location: str = Field(None, max_length=255, validate_default=True)
    mode: str = Field(None, max_length=50, validate_default=True)
    audience: str = Field(None, max_length=255, validate_default=True)
    organizer: str = Field(None, max_length=255, validate_default=True)
    date: str = Field(None, validate_default=True)
    time: str = Field(None, validate_default=True)
    agenda: list[str] = Field(None, validate_default=True)
    tags: list[str] = Field(None, validate_default=True)


class EventUpdate(_EventFields):
    """Partial update; omitted fields keep their stored value."""

    allow_missing: ClassVar[bool] = True

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    overview: Optional[str] = None
    image: Optional[str] = Field(None, max_length=1024)
    venue: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    mode: Optional[str] = Field(None, max_length=50)
    audience: Optional[str] = Field(None, max_length=255)
    organizer: Optional[str] = Field(None, max_length=255)
    date: Optional[str] = None
    time: Optional[str] = None
    agenda: Optional[list[str]] = None
    tags: Optional[list[str]] = None


class EventResponse(BaseModel):
    id: int
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
    agenda: list[str]
    organizer: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False
