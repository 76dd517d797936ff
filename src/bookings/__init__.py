"""
Booking & Ticketing Module

Student bus-pass bookings for the Bus Pass Booking System. It includes:

- Booking creation guarded by the route's seat counter
- Compensating seat release when a booking cannot be saved or is deleted
- Payment status management for pay-at-college bookings
- Digital tickets with signed codes and QR images

Key Components:
- booking_service.py: booking lifecycle and admin queries
- compensation.py: reserve-then-persist / delete-then-release helper
- ticket_service.py: ticket code and QR code generation
- router.py: FastAPI endpoints for students
- schemas.py: Pydantic models for booking requests, bookings and tickets
"""

from .router import router, status_router
from .booking_service import BookingService
from .compensation import SeatCompensation
from .ticket_service import TicketService
from .schemas import BookingCreate, Booking, BookingCreatedResponse, BookingList, Ticket

__all__ = [
    "router",
    "status_router",
    "BookingService",
    "SeatCompensation",
    "TicketService",
    "BookingCreate",
    "Booking",
    "BookingCreatedResponse",
    "BookingList",
    "Ticket"
]
