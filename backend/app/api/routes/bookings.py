"""
Booking endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_gateway
from app.db.gateway import SqlAlchemyGateway
from app.db.session import get_db
from app.schemas.booking import BookingCreate, BookingResponse
from app.services.booking_service import create_booking, list_bookings

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    gateway: SqlAlchemyGateway = Depends(get_gateway),
):
    """
    Book an event by email.
    Returns 422 with code "referenced_event_missing" if the event id is unknown.
    """
    return await create_booking(gateway, booking_data)


@router.get("/", response_model=list[BookingResponse])
async def list_bookings_endpoint(
    event_id: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    return await list_bookings(db, event_id)
