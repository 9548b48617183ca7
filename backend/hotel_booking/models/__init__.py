from hotel_booking.models.user import User, UserSession
from hotel_booking.models.ticket import Enrollment, Ticket, TicketStatus, TicketType
from hotel_booking.models.hotel import Hotel, Room
from hotel_booking.models.booking import Booking

__all__ = [
    "User", "UserSession",
    "Enrollment", "Ticket", "TicketStatus", "TicketType",
    "Hotel", "Room",
    "Booking",
]
