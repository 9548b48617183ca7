"""
Booking decision engine.

Authorizes reads and writes of a user's single booking by running ordered
checks against the eligibility checker and the capacity allocator, then
reading/writing the booking store. Checks short-circuit on the first failure.

Create:   room id valid -> eligible ticket -> room exists -> room has space
          -> no booking yet -> insert
Replace:  holds a booking -> booking id matches -> room exists -> room has space
          -> move booking

Every rejection is logged and counted with its reason before it propagates;
the HTTP layer only ever sees the failure kind.

Store calls made with for_update=True hold row locks until the request
transaction ends, which serializes writers per room and per user. See
infrastructure/booking_store.py.
"""

from typing import Any, NoReturn, Optional

from hotel_booking.core.errors import (
    BookingError,
    BookingMismatchError,
    BookingNotFoundError,
    DuplicateBookingError,
    InvalidRoomIdError,
    NoBookingToReplaceError,
    RoomNotFoundError,
)
from hotel_booking.core.logging import get_logger
from hotel_booking.core.metrics import booking_latency, record_booking_decision
from hotel_booking.models import Booking, Room
from hotel_booking.services.capacity_service import allocate_slot
from hotel_booking.services.eligibility_service import check_hotel_eligibility
from hotel_booking.services.interfaces.booking_store import BookingStore

logger = get_logger(__name__)


def is_valid_id(value: Any) -> bool:
    """Positive integer, and not a bool in disguise."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class BookingService:
    def __init__(self, store: BookingStore):
        self.store = store

    async def get_booking(self, user_id: int) -> tuple[Booking, Room]:
        """Return the caller's booking together with its room."""
        found = await self.store.find_booking_with_room(user_id)
        if found is None:
            self._reject("get", BookingNotFoundError(f"user {user_id} has no booking"), user_id=user_id)
        record_booking_decision("get", "success")
        return found

    async def create_booking(self, user_id: int, room_id: Optional[int]) -> Booking:
        """
        Reserve a room for a user who holds none yet.

        Malformed room ids are rejected as forbidden, not as not-found: a
        missing room is a domain fact, a missing id is a caller error.
        """
        with booking_latency.labels(operation="create").time():
            try:
                if not is_valid_id(room_id):
                    raise InvalidRoomIdError(f"room id {room_id!r} is not a positive integer")

                await check_hotel_eligibility(self.store, user_id)
                room = await allocate_slot(self.store, room_id)

                if await self.store.find_booking_by_user(user_id) is not None:
                    raise DuplicateBookingError(f"user {user_id} already holds a booking")

                booking = await self.store.create_booking(user_id, room.id)
            except BookingError as exc:
                self._reject("create", exc, user_id=user_id, room_id=room_id)

        record_booking_decision("create", "success")
        logger.info(
            "booking_created",
            booking_id=booking.id,
            user_id=user_id,
            room_id=room.id,
        )
        return booking

    async def replace_booking(self, user_id: int, booking_id: int, room_id: Optional[int]) -> Booking:
        """
        Move the caller's booking to another room, keeping its id.

        Capacity compares the target room's raw occupancy: the caller's own
        booking counts only when it already sits in that room.
        """
        with booking_latency.labels(operation="replace").time():
            try:
                booking = await self.store.find_booking_by_user(user_id, for_update=True)
                if booking is None:
                    raise NoBookingToReplaceError(f"user {user_id} has no booking to replace")
                if booking.id != booking_id:
                    raise BookingMismatchError(f"booking {booking_id} is not held by user {user_id}")

                if not is_valid_id(room_id):
                    raise RoomNotFoundError(f"room id {room_id!r} does not resolve to a room")

                previous_room_id = booking.room_id
                room = await allocate_slot(self.store, room_id)
                booking = await self.store.move_booking(booking, room.id)
            except BookingError as exc:
                self._reject(
                    "replace", exc, user_id=user_id, booking_id=booking_id, room_id=room_id
                )

        record_booking_decision("replace", "success")
        logger.info(
            "booking_replaced",
            booking_id=booking.id,
            user_id=user_id,
            from_room_id=previous_room_id,
            to_room_id=room.id,
        )
        return booking

    def _reject(self, operation: str, error: BookingError, **context: Any) -> NoReturn:
        record_booking_decision(operation, error.reason)
        logger.warning(
            "booking_rejected",
            operation=operation,
            kind=error.kind.value,
            reason=error.reason,
            **context,
        )
        raise error
