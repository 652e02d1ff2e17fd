"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from app.core.errors import ValidationError
from app.services.booking_validator import coerce_email, require_event_reference


class BookingCreate(BaseModel):
    # Defaults are validated, so an omitted field fails with the rule's message
    event_id: int = Field(None, validate_default=True)
    email: str = Field(None, validate_default=True)

    @field_validator("event_id", mode="before")
    @classmethod
    def _event_reference(cls, v):
        try:
            return require_event_reference(v)
        except ValidationError as e:
            raise ValueError(e.message) from None

    @field_validator("email", mode="before")
    @classmethod
    def _coerce_email(cls, v) -> str:
        try:
            return coerce_email(v)
        except ValidationError as e:
            raise ValueError(e.message) from None


class BookingResponse(BaseModel):
    id: int
    event_id: int
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}
