from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from datetime import date
from sqlalchemy.orm import Session
import math

from .schemas import (
    BookingStats, MessageResponse, Pagination, PaymentStatusUpdate,
    SeatReconciliation, SettingsResponse, SettingsUpdate
)
from .admin_service import AdminManagementService
from .settings_service import SettingsService
from ..auth.dependencies import require_admin
from ..bookings.booking_service import BookingService
from ..bookings.schemas import Booking, BookingList, TicketVerification, TicketVerifyRequest
from ..bookings.ticket_service import TicketService
from ..buses.router import build_bus_detail
from ..buses.schemas import Bus, BusCreate, BusUpdate
from ..buses.service import BusService
from ..database import get_db

router = APIRouter()

# Settings Endpoints
@router.get("/settings", response_model=SettingsResponse)
def get_settings(
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Booking switch, travel dates and seats per route"""
    return SettingsService(db).get_settings()

@router.patch("/settings", response_model=SettingsResponse)
def update_settings(
    update: SettingsUpdate,
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update settings; route seat counts are overridden as given"""
    return SettingsService(db).update_settings(update)

# Bus Management Endpoints
@router.get("/buses", response_model=List[Bus])
def list_buses(
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """All buses, active or not"""
    service = BusService(db)
    availability = service.get_availability()
    return [build_bus_detail(bus, availability) for bus in service.list_buses()]

@router.post("/buses", response_model=Bus, status_code=status.HTTP_201_CREATED)
def create_bus(
    bus_data: BusCreate,
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a bus; the route code must be unused"""
    service = BusService(db)
    bus = service.create_bus(bus_data)
    return build_bus_detail(bus, service.get_availability())

@router.post("/buses/reset-seats")
def reset_all_seats(
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Refill every active route to full capacity"""
    seats = BusService(db).reset_all_seats()
    return {"message": "Seats reset", "busAvailability": seats}

@router.put("/buses/{route_code}", response_model=Bus)
def update_bus(
    route_code: str,
    update_data: BusUpdate,
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update a bus by route code"""
    service = BusService(db)
    bus = service.update_bus(route_code, update_data)
    return build_bus_detail(bus, service.get_availability())

@router.delete("/buses/{route_code}", response_model=MessageResponse)
def delete_bus(
    route_code: str,
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a bus together with its route's seats and bookings"""
    removed = BusService(db).delete_bus(route_code)
    return MessageResponse(message=f"Bus deleted successfully ({removed} bookings removed)")

# Booking Management Endpoints
@router.get("/bookings", response_model=BookingList)
def list_bookings(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(50, ge=1, le=500, description="Bookings per page"),
    bus_route: Optional[str] = Query(None, description="Filter by route code"),
    payment_status: Optional[bool] = Query(None, description="Filter by payment status"),
    start_date: Optional[date] = Query(None, description="Created on or after"),
    end_date: Optional[date] = Query(None, description="Created on or before"),
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Bookings, newest first"""
    bookings, total = BookingService(db).list_bookings(
        page=page,
        limit=limit,
        bus_route=bus_route,
        payment_status=payment_status,
        start_date=start_date,
        end_date=end_date
    )

    return BookingList(
        bookings=[Booking.model_validate(b) for b in bookings],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit)
        )
    )

@router.get("/bookings/stats", response_model=BookingStats)
def get_booking_stats(
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Booking totals for the dashboard"""
    return BookingStats(**BookingService(db).get_booking_stats())

@router.put("/bookings/{booking_id}", response_model=Booking)
def update_booking_payment_status(
    booking_id: int,
    update: PaymentStatusUpdate,
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Mark a pay-at-college booking as paid, or undo it"""
    return BookingService(db).update_payment_status(booking_id, update.payment_status)

@router.delete("/bookings/{booking_id}", response_model=MessageResponse)
def delete_booking(
    booking_id: int,
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a booking and free its seat"""
    BookingService(db).delete_booking(booking_id)
    return MessageResponse(message="Booking deleted successfully")

# Ticket Checks
@router.post("/tickets/verify", response_model=TicketVerification)
def verify_ticket(
    request: TicketVerifyRequest,
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Check the code printed on a student's ticket"""
    booking = BookingService(db).get_booking(request.booking_id)
    if not TicketService(db).verify_ticket_code(booking, request.code):
        return TicketVerification(valid=False)
    return TicketVerification(valid=True, booking=Booking.model_validate(booking))

# Seat Reconciliation Endpoints
@router.get("/reconciliations", response_model=List[SeatReconciliation])
def list_reconciliations(
    resolved: Optional[bool] = Query(None, description="Filter by resolution"),
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Routes whose seat count may be off after a failed release"""
    return AdminManagementService(db).list_reconciliations(resolved)

@router.post("/reconciliations/{reconciliation_id}/resolve", response_model=SeatReconciliation)
def resolve_reconciliation(
    reconciliation_id: int,
    admin_user = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Mark a flagged route as fixed"""
    return AdminManagementService(db).resolve_reconciliation(reconciliation_id, admin_user.username)
