"""
Booking failure taxonomy.

Every domain failure is a subclass of BookingError carrying a closed `kind`
and a machine-readable `reason`. The HTTP boundary maps by kind alone through
STATUS_BY_KIND; the reason is only for logs, metrics and tests.
"""

from enum import Enum

from fastapi import Request, status
from fastapi.responses import JSONResponse

from hotel_booking.core.logging import get_logger

logger = get_logger(__name__)


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    BAD_REQUEST = "bad_request"


STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
}

# Public messages are per kind, never per reason
DETAIL_BY_KIND = {
    ErrorKind.NOT_FOUND: "Not found",
    ErrorKind.FORBIDDEN: "Request understood but not authorized",
    ErrorKind.BAD_REQUEST: "Bad request",
}


class BookingError(Exception):
    kind: ErrorKind
    reason: str

    def __init__(self, message: str = ""):
        super().__init__(message or self.reason)


class NotFoundError(BookingError):
    kind = ErrorKind.NOT_FOUND
    reason = "not_found"


class ForbiddenError(BookingError):
    kind = ErrorKind.FORBIDDEN
    reason = "forbidden"


class BadRequestError(BookingError):
    kind = ErrorKind.BAD_REQUEST
    reason = "bad_request"


# Eligibility


class EligibilityError(ForbiddenError):
    reason = "not_eligible"


class NoEnrollmentError(EligibilityError):
    reason = "no_enrollment"


class TicketNotPaidError(EligibilityError):
    reason = "ticket_not_paid"


class TicketNotHotelEligibleError(EligibilityError):
    reason = "ticket_not_hotel_eligible"


# Capacity and booking ownership


class InvalidRoomIdError(ForbiddenError):
    reason = "invalid_room_id"


class RoomFullError(ForbiddenError):
    reason = "room_full"


class DuplicateBookingError(ForbiddenError):
    reason = "duplicate_booking"


class NoBookingToReplaceError(ForbiddenError):
    reason = "no_booking_to_replace"


class BookingMismatchError(ForbiddenError):
    reason = "booking_mismatch"


class RoomNotFoundError(NotFoundError):
    reason = "room_not_found"


class BookingNotFoundError(NotFoundError):
    reason = "booking_not_found"


class MalformedBookingIdError(BadRequestError):
    reason = "malformed_booking_id"


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    status_code = STATUS_BY_KIND[exc.kind]
    logger.info(
        "booking_error_response",
        kind=exc.kind.value,
        reason=exc.reason,
        status_code=status_code,
    )
    return JSONResponse(status_code=status_code, content={"detail": DETAIL_BY_KIND[exc.kind]})


def register_exception_handlers(app) -> None:
    app.add_exception_handler(BookingError, booking_error_handler)
