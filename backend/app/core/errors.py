"""
Domain errors raised when a write is rejected.

ValidationError   - the input broke a rule; the caller fixes it and retries.
ConflictError     - the input was valid but collided with stored state (slug).
NotFoundError     - a lookup by id or slug found nothing.

The HTTP layer maps these to 422 / 409 / 404 in app.main.
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    VALIDATION_FAILED = "validation_failed"
    REFERENCED_EVENT_MISSING = "referenced_event_missing"
    SLUG_CONFLICT = "slug_conflict"
    RESOURCE_CONFLICT = "resource_conflict"
    RESOURCE_NOT_FOUND = "resource_not_found"


class DomainError(Exception):
    """Base error with a machine-readable code and a user-safe message."""

    code: ErrorCode = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"detail": self.message, "field": self.field, "code": self.code.value}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(field={self.field!r}, message={self.message!r})"


class ValidationError(DomainError):
    code = ErrorCode.VALIDATION_FAILED


class ReferencedEventNotFoundError(ValidationError):
    """A Booking points at an Event id that is not stored."""

    code = ErrorCode.REFERENCED_EVENT_MISSING

    def __init__(self, event_id) -> None:
        super().__init__("Referenced event does not exist", field="event_id")
        self.event_id = event_id


class ConflictError(DomainError):
    code = ErrorCode.RESOURCE_CONFLICT

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message, field=field)
        if field == "slug":
            self.code = ErrorCode.SLUG_CONFLICT


class NotFoundError(DomainError):
    code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, resource: str, key) -> None:
        super().__init__(f"{resource} {key} not found")
        self.resource = resource
        self.key = key
