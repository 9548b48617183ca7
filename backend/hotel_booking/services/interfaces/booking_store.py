"""
Booking store interface.
The decision engine depends on this, never on a session or a driver.
"""

from abc import ABC, abstractmethod
from typing import Optional

from hotel_booking.models import Booking, Enrollment, Room, Ticket, TicketType


class BookingStore(ABC):
    """
    Durable record of bookings plus the read-only records the engine consults.

    Implementations:
    - SqlAlchemyBookingStore: request-scoped AsyncSession over PostgreSQL

    Locking contract: `for_update=True` lookups hold their lock until the
    surrounding unit of work ends, and `create_booking` enforces one booking
    per user atomically, raising DuplicateBookingError on violation.
    """

    @abstractmethod
    async def find_enrollment_by_user(self, user_id: int) -> Optional[Enrollment]:
        pass

    @abstractmethod
    async def find_ticket_with_type(self, enrollment_id: int) -> Optional[tuple[Ticket, TicketType]]:
        pass

    @abstractmethod
    async def find_room(self, room_id: int, *, for_update: bool = False) -> Optional[Room]:
        """
        Look up a room.

        Args:
            room_id: Room to load
            for_update: Serialize with other writers targeting the same room
        """
        pass

    @abstractmethod
    async def count_room_bookings(self, room_id: int) -> int:
        pass

    @abstractmethod
    async def find_booking_by_user(self, user_id: int, *, for_update: bool = False) -> Optional[Booking]:
        pass

    @abstractmethod
    async def find_booking_with_room(self, user_id: int) -> Optional[tuple[Booking, Room]]:
        pass

    @abstractmethod
    async def create_booking(self, user_id: int, room_id: int) -> Booking:
        pass

    @abstractmethod
    async def move_booking(self, booking: Booking, room_id: int) -> Booking:
        """Point an existing booking at another room. The id is unchanged."""
        pass
