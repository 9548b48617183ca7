from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.db.session import get_db
from hotel_booking.infrastructure.booking_store import SqlAlchemyBookingStore
from hotel_booking.services.booking_service import BookingService


async def get_booking_service(db: AsyncSession = Depends(get_db)) -> BookingService:
    return BookingService(SqlAlchemyBookingStore(db))
