from hotel_booking.schemas.booking import BookingIdResponse, BookingWithRoom, RoomSelection, RoomSummary

__all__ = [
    "RoomSelection", "RoomSummary",
    "BookingWithRoom", "BookingIdResponse",
]
