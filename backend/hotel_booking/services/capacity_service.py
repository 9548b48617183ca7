"""
Room capacity allocation.

A room has a free slot iff occupancy < capacity; a room holding exactly
`capacity` bookings is full. The room row is locked before counting so the
count cannot go stale before the caller writes (see infrastructure/booking_store.py).
"""

from hotel_booking.core.errors import RoomFullError, RoomNotFoundError
from hotel_booking.models import Room
from hotel_booking.services.interfaces.booking_store import BookingStore


def has_free_slot(capacity: int, occupancy: int) -> bool:
    return occupancy < capacity


async def allocate_slot(store: BookingStore, room_id: int) -> Room:
    """Lock the room and confirm it can take one more booking."""
    room = await store.find_room(room_id, for_update=True)
    if room is None:
        raise RoomNotFoundError(f"room {room_id} does not exist")

    occupancy = await store.count_room_bookings(room.id)
    if not has_free_slot(room.capacity, occupancy):
        raise RoomFullError(f"room {room.id} is full ({occupancy}/{room.capacity})")

    return room
