"""
Service interfaces for dependency inversion.
Allows swapping the booking store without changing business logic.
"""

from .booking_store import BookingStore

__all__ = ['BookingStore']
