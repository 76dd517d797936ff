from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import datetime, date

from src.admin.schemas import Pagination
from src.payments.schemas import PaymentProof

# Booking Request Models
class BookingCreate(BaseModel):
    """Student booking request from the booking wizard"""
    student_name: str = Field(..., alias="studentName", max_length=255)
    admission_number: str = Field(..., alias="admissionNumber")
    bus_route: str = Field(..., alias="busRoute", max_length=50)
    destination: str = Field(..., max_length=255)
    payment_status: bool = Field(False, alias="paymentStatus")
    timestamp: Optional[datetime] = None
    payment: Optional[PaymentProof] = None

    class Config:
        populate_by_name = True

    @validator('student_name', 'bus_route', 'destination')
    def strip_text(cls, v):
        return v.strip()

    @validator('admission_number')
    def normalize_admission_number(cls, v):
        return v.strip().upper()

# Booking Response Models
class Booking(BaseModel):
    """Stored booking"""
    id: int
    admission_number: str
    student_name: str
    bus_route: str
    destination: str
    payment_status: bool
    payment_reference: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BookingCreatedResponse(BaseModel):
    success: bool = True
    booking: Booking

class BookingList(BaseModel):
    bookings: List[Booking]
    pagination: Pagination

# Ticket
class Ticket(BaseModel):
    """Boarding pass shown to the student after booking"""
    booking: Booking
    bus_name: Optional[str] = None
    fare: Optional[int] = None
    go_date: Optional[date] = None
    return_date: Optional[date] = None
    ticket_code: str
    qr_code: str
    issued_at: datetime

class TicketVerifyRequest(BaseModel):
    """Code read off a student's ticket at boarding"""
    booking_id: int = Field(..., alias="bookingId")
    code: str = Field(..., min_length=1, max_length=64)

    class Config:
        populate_by_name = True

class TicketVerification(BaseModel):
    valid: bool
    booking: Optional[Booking] = None
