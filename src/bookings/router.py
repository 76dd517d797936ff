from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from src.database import get_db
from src.admin.schemas import BookingStatusResponse
from src.admin.settings_service import SettingsService
from src.bookings.schemas import Booking, BookingCreate, BookingCreatedResponse, Ticket
from src.bookings.booking_service import BookingService
from src.bookings.ticket_service import TicketService
from src.payments.gateway import PaymentBridge, get_payment_bridge

router = APIRouter()
status_router = APIRouter()

@router.post("", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingCreate,
    db: Session = Depends(get_db),
    bridge: PaymentBridge = Depends(get_payment_bridge)
):
    """Book a seat on a route"""

    booking_service = BookingService(db, payment_bridge=bridge)
    booking = booking_service.create_booking(
        student_name=request.student_name,
        admission_number=request.admission_number,
        route_code=request.bus_route,
        destination=request.destination,
        payment_status=request.payment_status,
        created_at=request.timestamp,
        payment=request.payment
    )
    return BookingCreatedResponse(booking=Booking.model_validate(booking))

@router.get("/{booking_id}", response_model=Booking)
def get_booking(
    booking_id: int,
    admission_number: str = Query(..., alias="admissionNumber", description="Admission number the booking was made with"),
    db: Session = Depends(get_db)
):
    """Get a booking; the admission number must match"""
    return BookingService(db).get_student_booking(booking_id, admission_number)

@router.get("/{booking_id}/ticket", response_model=Ticket)
def get_ticket(
    booking_id: int,
    admission_number: str = Query(..., alias="admissionNumber", description="Admission number the booking was made with"),
    db: Session = Depends(get_db)
):
    """Ticket with QR code for a booking"""
    booking = BookingService(db).get_student_booking(booking_id, admission_number)
    return TicketService(db).build_ticket(booking)

@status_router.get("/booking-status", response_model=BookingStatusResponse)
def get_booking_status(db: Session = Depends(get_db)):
    """Whether the booking wizard is open"""
    return BookingStatusResponse(enabled=SettingsService(db).is_booking_enabled())
