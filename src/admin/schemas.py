from pydantic import BaseModel, Field, validator
from typing import List, Optional, Dict
from datetime import datetime, date

# Booking Settings
class BookingSettings(BaseModel):
    """Global booking switches, stored as a single row"""
    booking_enabled: bool = False
    go_date: Optional[date] = None
    return_date: Optional[date] = None
    current_bookings: int = 0

    class Config:
        from_attributes = True

class SettingsResponse(BaseModel):
    """Settings as shown on the admin dashboard"""
    booking_enabled: bool = Field(..., alias="bookingEnabled")
    go_date: Optional[date] = Field(None, alias="goDate")
    return_date: Optional[date] = Field(None, alias="returnDate")
    bus_availability: Dict[str, int] = Field(default_factory=dict, alias="busAvailability")
    current_bookings: int = Field(0, alias="currentBookings")

    class Config:
        populate_by_name = True

class SettingsUpdate(BaseModel):
    """Partial settings update; omitted fields are left untouched"""
    booking_enabled: Optional[bool] = Field(None, alias="bookingEnabled")
    go_date: Optional[date] = Field(None, alias="goDate")
    return_date: Optional[date] = Field(None, alias="returnDate")
    bus_availability: Optional[Dict[str, int]] = Field(None, alias="busAvailability")

    class Config:
        populate_by_name = True

    @validator('go_date', 'return_date', pre=True)
    def blank_date_is_none(cls, v):
        if v == "":
            return None
        return v

    @validator('bus_availability')
    def validate_seat_counts(cls, v):
        if v is None:
            return v
        for route, seats in v.items():
            if not route.strip():
                raise ValueError('Route code cannot be blank')
            if seats < 0:
                raise ValueError(f'Available seats for {route} cannot be negative')
        return v

class BookingStatusResponse(BaseModel):
    enabled: bool

# Booking Administration
class PaymentStatusUpdate(BaseModel):
    payment_status: bool

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int = Field(..., alias="totalPages")

    class Config:
        populate_by_name = True

class RouteBookingCount(BaseModel):
    route: str
    count: int

class BookingStats(BaseModel):
    total_bookings: int = Field(..., alias="totalBookings")
    paid_bookings: int = Field(..., alias="paidBookings")
    pending_bookings: int = Field(..., alias="pendingBookings")
    recent_bookings: int = Field(..., alias="recentBookings")
    route_stats: List[RouteBookingCount] = Field(default_factory=list, alias="routeStats")

    class Config:
        populate_by_name = True

# Seat Reconciliation
class SeatReconciliation(BaseModel):
    id: int
    bus_route: str
    booking_id: Optional[int] = None
    reason: str
    resolved: bool
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class MessageResponse(BaseModel):
    message: str
