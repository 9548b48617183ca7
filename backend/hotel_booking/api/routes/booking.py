"""
Booking endpoints: read, reserve and move the caller's single hotel booking.

Domain failures raised by the engine are turned into 403/404/400 by the
exception handler in core/errors.py; routes never inspect them.
"""

import re
from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.api.deps import get_booking_service
from hotel_booking.core.errors import MalformedBookingIdError
from hotel_booking.core.logging import get_logger
from hotel_booking.core.security import get_current_user_id
from hotel_booking.db.session import get_db
from hotel_booking.schemas.booking import BookingIdResponse, BookingWithRoom, RoomSelection, RoomSummary
from hotel_booking.services.booking_service import BookingService
from hotel_booking.services.cache_service import (
    get_cached_booking,
    invalidate_booking_cache,
    set_cached_booking,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/booking", tags=["Booking"])

# Plain ASCII integer; int() alone would also take " 1", "+1" and "1_0"
BOOKING_ID_PATTERN = re.compile(r"-?[0-9]+")


@router.get("", response_model=BookingWithRoom)
async def get_booking(
    user_id: int = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    """
    Get the caller's booking with its room.
    Served from Redis when cached; writes to the booking drop the cached copy.
    """
    cached = await get_cached_booking(user_id)
    if cached:
        logger.info("booking_cache_hit", user_id=user_id)
        return BookingWithRoom(**cached)

    booking, room = await service.get_booking(user_id)
    response = BookingWithRoom(id=booking.id, room=RoomSummary.model_validate(room))

    await set_cached_booking(user_id, response.model_dump())
    return response


@router.post("", response_model=BookingIdResponse)
async def create_booking(
    payload: Any = Body(default=None),
    user_id: int = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Reserve a room. Body is `{"roomId": <int>}` or a bare integer.

    A missing or unusable room id is refused with 403 rather than 422, so all
    caller mistakes land in the same bucket as other refusals.
    """
    room_id = RoomSelection.room_id_from(payload)
    booking = await service.create_booking(user_id, room_id)

    # Durable before the client sees 200, and before the cached copy is dropped
    await db.commit()
    await invalidate_booking_cache(user_id)
    return BookingIdResponse(id=booking.id)


@router.put("/{booking_id}", response_model=BookingIdResponse)
async def replace_booking(
    booking_id: str,
    payload: Any = Body(default=None),
    user_id: int = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
    db: AsyncSession = Depends(get_db),
):
    """Move the caller's booking to another room. The booking id is kept."""
    if not BOOKING_ID_PATTERN.fullmatch(booking_id):
        raise MalformedBookingIdError(f"booking id {booking_id!r} is not an integer")

    room_id = RoomSelection.room_id_from(payload)
    booking = await service.replace_booking(user_id, int(booking_id), room_id)

    await db.commit()
    await invalidate_booking_cache(user_id)
    return BookingIdResponse(id=booking.id)
