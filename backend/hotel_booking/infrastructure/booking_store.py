"""
SQLAlchemy implementation of the booking store.

CONCURRENCY STRATEGY: Row locks + unique constraint
===================================================

Problem:
  Two requests target the last free slot of a room. Both count occupancy=N-1,
  both insert. Result: overbooking. Likewise two Creates for the same user both
  pass the "no booking yet" check and insert two rows.

Solution:
  - Capacity: the room row is read with SELECT ... FOR UPDATE before counting.
    Writers on the same room queue on that lock; under READ COMMITTED the
    count that follows sees every booking committed by earlier lock holders.
    The lock lives until the request transaction commits (see db/session.py).
  - One booking per user: UNIQUE(bookings.user_id). A losing concurrent insert
    fails on flush and is reported as DuplicateBookingError.
  - Replace locks the caller's own booking row, so two moves by the same user
    are applied one after the other.

  Rooms are never written here, so the room lock does not contend with anything
  but other booking writers for that room.
"""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.core.errors import DuplicateBookingError
from hotel_booking.core.logging import get_logger
from hotel_booking.models import Booking, Enrollment, Room, Ticket, TicketType
from hotel_booking.services.interfaces.booking_store import BookingStore

logger = get_logger(__name__)


class SqlAlchemyBookingStore(BookingStore):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_enrollment_by_user(self, user_id: int) -> Optional[Enrollment]:
        result = await self.db.execute(select(Enrollment).where(Enrollment.user_id == user_id))
        return result.scalar_one_or_none()

    async def find_ticket_with_type(self, enrollment_id: int) -> Optional[tuple[Ticket, TicketType]]:
        result = await self.db.execute(
            select(Ticket, TicketType)
            .join(TicketType, Ticket.ticket_type_id == TicketType.id)
            .where(Ticket.enrollment_id == enrollment_id)
        )
        row = result.first()
        if row is None:
            return None
        ticket, ticket_type = row
        return ticket, ticket_type

    async def find_room(self, room_id: int, *, for_update: bool = False) -> Optional[Room]:
        query = select(Room).where(Room.id == room_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def count_room_bookings(self, room_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Booking.id)).where(Booking.room_id == room_id)
        )
        return int(result.scalar_one())

    async def find_booking_by_user(self, user_id: int, *, for_update: bool = False) -> Optional[Booking]:
        query = select(Booking).where(Booking.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_booking_with_room(self, user_id: int) -> Optional[tuple[Booking, Room]]:
        result = await self.db.execute(
            select(Booking, Room)
            .join(Room, Booking.room_id == Room.id)
            .where(Booking.user_id == user_id)
        )
        row = result.first()
        if row is None:
            return None
        booking, room = row
        return booking, room

    async def create_booking(self, user_id: int, room_id: int) -> Booking:
        booking = Booking(user_id=user_id, room_id=room_id)
        self.db.add(booking)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            # The request transaction is rolled back by get_db
            logger.warning("booking_insert_conflict", user_id=user_id, room_id=room_id)
            raise DuplicateBookingError(f"user {user_id} already holds a booking") from exc
        await self.db.refresh(booking)
        return booking

    async def move_booking(self, booking: Booking, room_id: int) -> Booking:
        booking.room_id = room_id
        await self.db.flush()
        await self.db.refresh(booking)
        return booking
