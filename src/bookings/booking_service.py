from typing import List, Dict, Optional, Tuple, Any
from datetime import datetime, date, time, timedelta
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import re

from src.admin.settings_service import SettingsService
from src.buses.inventory import InventoryGuard
from src.buses.service import BusService
from src.bookings.compensation import SeatCompensation
from src.exceptions import BookingClosedError, ConflictError, NotFoundError, ValidationError
from src.logger_config import logger
from src.models import AdminSettings, Booking, BusAvailability
from src.payments.gateway import PaymentBridge
from src.payments.schemas import PaymentProof

ADMISSION_NUMBER_RE = re.compile(r"^[A-Z0-9]{7}$")
STUDENT_NAME_RE = re.compile(r"^[A-Za-z\s]+$")
PAYMENT_ALREADY_USED = "This payment has already been used for a booking"

class BookingService:
    """Service for student bus-pass bookings"""

    def __init__(self, db: Session, payment_bridge: Optional[PaymentBridge] = None):
        self.db = db
        self.guard = InventoryGuard(db)
        self.compensation = SeatCompensation(db, self.guard)
        self.settings_service = SettingsService(db)
        self.bus_service = BusService(db)
        self.payment_bridge = payment_bridge or PaymentBridge()

    def create_booking(
        self,
        student_name: str,
        admission_number: str,
        route_code: str,
        destination: str,
        payment_status: bool = False,
        created_at: Optional[datetime] = None,
        payment: Optional[PaymentProof] = None
    ) -> Booking:
        """Reserve a seat on the route and record the booking.

        Nothing is written unless every check passes and a seat is free. A
        failed insert after the reservation gives the seat back.
        """

        self._validate_fields(student_name, admission_number, route_code, destination)

        if not self.settings_service.is_booking_enabled():
            raise BookingClosedError()

        self._validate_route(route_code, destination)

        payment_reference = None
        if payment is not None:
            if not self.payment_bridge.verify_payment(payment.order_id, payment.payment_id, payment.signature):
                raise ValidationError("Payment signature verification failed")
            self._ensure_payment_unused(payment.payment_id)
            payment_status = True
            payment_reference = payment.payment_id

        # Close the read transaction; the reservation commits on its own
        self.db.commit()

        def persist() -> Booking:
            booking = Booking(
                student_name=student_name,
                admission_number=admission_number,
                bus_route=route_code,
                destination=destination,
                payment_status=payment_status,
                payment_reference=payment_reference,
                created_at=created_at or datetime.now(),
            )
            self.db.add(booking)
            self.db.execute(
                update(AdminSettings)
                .values(current_bookings=AdminSettings.current_bookings + 1)
                .execution_options(synchronize_session=False)
            )
            try:
                self.db.commit()
            except IntegrityError as e:
                # Lost a race with another booking using the same payment
                self.db.rollback()
                raise ConflictError(PAYMENT_ALREADY_USED) from e
            self.db.refresh(booking)
            return booking

        booking = self.compensation.reserve_then_persist(route_code, persist)
        logger.info(f"Booking {booking.id} created for {admission_number} on route {route_code}")
        return booking

    def delete_booking(self, booking_id: int) -> None:
        """Delete a booking and return its seat to the route"""

        booking = self.get_booking(booking_id)
        route_code = booking.bus_route

        def delete() -> None:
            self.db.delete(booking)
            self.db.execute(
                update(AdminSettings)
                .where(AdminSettings.current_bookings > 0)
                .values(current_bookings=AdminSettings.current_bookings - 1)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()

        self.compensation.delete_then_release(route_code, booking_id, delete)
        logger.info(f"Booking {booking_id} deleted from route {route_code}")

    def update_payment_status(self, booking_id: int, paid: bool) -> Booking:
        """Mark a booking paid or unpaid; seats are not affected"""

        booking = self.get_booking(booking_id)
        if booking.payment_status != paid:
            booking.payment_status = paid
            self.db.commit()
            self.db.refresh(booking)
        return booking

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def get_student_booking(self, booking_id: int, admission_number: str) -> Booking:
        """Booking as seen by its student; a wrong admission number reads as not found"""

        booking = self.db.get(Booking, booking_id)
        if not booking or booking.admission_number != admission_number.strip().upper():
            raise NotFoundError("Booking not found")
        return booking

    def list_bookings(
        self,
        page: int = 1,
        limit: int = 50,
        bus_route: Optional[str] = None,
        payment_status: Optional[bool] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Tuple[List[Booking], int]:
        """Bookings newest first, filtered and paginated"""

        query = self.db.query(Booking)

        if bus_route:
            query = query.filter(Booking.bus_route == bus_route)

        if payment_status is not None:
            query = query.filter(Booking.payment_status == payment_status)

        if start_date:
            query = query.filter(Booking.created_at >= datetime.combine(start_date, time.min))

        if end_date:
            query = query.filter(Booking.created_at <= datetime.combine(end_date, time.max))

        total = query.count()
        bookings = query.order_by(Booking.created_at.desc(), Booking.id.desc()).offset(
            (page - 1) * limit
        ).limit(limit).all()

        return bookings, total

    def get_booking_stats(self) -> Dict[str, Any]:
        """Totals for the admin dashboard"""

        total_bookings = self.db.query(func.count(Booking.id)).scalar() or 0
        paid_bookings = self.db.query(func.count(Booking.id)).filter(
            Booking.payment_status == True
        ).scalar() or 0

        week_ago = datetime.now() - timedelta(days=7)
        recent_bookings = self.db.query(func.count(Booking.id)).filter(
            Booking.created_at >= week_ago
        ).scalar() or 0

        route_rows = self.db.query(Booking.bus_route, func.count(Booking.id)).group_by(
            Booking.bus_route
        ).order_by(Booking.bus_route).all()

        return {
            "total_bookings": total_bookings,
            "paid_bookings": paid_bookings,
            "pending_bookings": total_bookings - paid_bookings,
            "recent_bookings": recent_bookings,
            "route_stats": [{"route": route, "count": count} for route, count in route_rows],
        }

    def _validate_fields(
        self,
        student_name: str,
        admission_number: str,
        route_code: str,
        destination: str
    ) -> None:
        if not student_name or len(student_name.strip()) < 2:
            raise ValidationError("Name must be at least 2 characters")

        if not STUDENT_NAME_RE.match(student_name):
            raise ValidationError("Name can only contain letters and spaces")

        if not admission_number or not ADMISSION_NUMBER_RE.match(admission_number):
            raise ValidationError(
                "Admission number must be exactly 7 uppercase letters or numbers (e.g., 24CS094)"
            )

        if not route_code:
            raise ValidationError("Bus route is required")

        if not destination:
            raise ValidationError("Destination is required")

    def _validate_route(self, route_code: str, destination: str) -> None:
        # A route is bookable only with both a bus (its capacity) and a seat counter
        bus = self.bus_service.find_bus(route_code)
        has_inventory = self.db.query(BusAvailability.id).filter(
            BusAvailability.bus_route == route_code
        ).first()
        if bus is None or not has_inventory:
            raise NotFoundError(f"Bus route {route_code} not found")

        if not bus.is_active:
            raise ValidationError("This bus route is not accepting bookings")

        stop_names = {stop.name.lower() for stop in bus.stops}
        if stop_names and destination.lower() not in stop_names:
            raise ValidationError("Destination is not a stop on this route")

    def _ensure_payment_unused(self, payment_id: str) -> None:
        used = self.db.query(Booking.id).filter(Booking.payment_reference == payment_id).first()
        if used:
            logger.warning(f"Payment {payment_id} replayed; already attached to booking {used.id}")
            raise ConflictError(PAYMENT_ALREADY_USED)
