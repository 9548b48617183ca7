"""
Hotel eligibility: does this user hold a paid, in-person, hotel-inclusive ticket?

Read only. Each failure has its own exception class so the reason survives in
logs and metrics, even though all of them reach the client as a plain 403.
"""

from hotel_booking.core.errors import NoEnrollmentError, TicketNotHotelEligibleError, TicketNotPaidError
from hotel_booking.models import Ticket, TicketStatus
from hotel_booking.services.interfaces.booking_store import BookingStore


async def check_hotel_eligibility(store: BookingStore, user_id: int) -> Ticket:
    """
    Return the user's eligible ticket.

    Raises:
        NoEnrollmentError: user never enrolled
        TicketNotPaidError: no ticket, or the ticket is still RESERVED
        TicketNotHotelEligibleError: remote ticket, or hotel not included
    """
    enrollment = await store.find_enrollment_by_user(user_id)
    if enrollment is None:
        raise NoEnrollmentError(f"user {user_id} has no enrollment")

    found = await store.find_ticket_with_type(enrollment.id)
    if found is None:
        raise TicketNotPaidError(f"enrollment {enrollment.id} has no ticket")

    ticket, ticket_type = found
    if ticket.status == TicketStatus.RESERVED:
        raise TicketNotPaidError(f"ticket {ticket.id} is not paid")

    if not ticket_type.is_hotel_eligible:
        raise TicketNotHotelEligibleError(f"ticket type {ticket_type.id} does not include a hotel stay")

    return ticket
