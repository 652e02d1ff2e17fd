from app.schemas.event import EventCreate, EventUpdate, EventResponse, EventListResponse
from app.schemas.booking import BookingCreate, BookingResponse

__all__ = [
    "EventCreate", "EventUpdate", "EventResponse", "EventListResponse",
    "BookingCreate", "BookingResponse",
]
