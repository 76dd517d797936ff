"""Two-step changes that pair the seat counter with a booking row.

The seat counter and the booking row are written in separate transactions, so
neither order is atomic on its own:

- creating a booking reserves a seat first, then inserts the row; if the
  insert fails the seat is released again;
- deleting a booking removes the row first, then releases the seat.

When the releasing step itself fails, the seat is stranded. That case is
logged and written to ``seat_reconciliations`` for an administrator to fix by
hand; it never undoes the step that already succeeded.
"""

from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.buses.inventory import InventoryGuard
from src.exceptions import (
    DomainError, InventoryExhaustedError, PersistenceError, StoreUnavailableError
)
from src.logger_config import logger
from src.models import SeatReconciliation

T = TypeVar("T")


class SeatCompensation:
    def __init__(self, db: Session, guard: InventoryGuard):
        self.db = db
        self.guard = guard

    def reserve_then_persist(self, route_code: str, persist: Callable[[], T]) -> T:
        """Reserve a seat on ``route_code``, then run ``persist``.

        Raises InventoryExhaustedError without touching anything when no seat
        is left. If ``persist`` raises, the seat is released and the error is
        re-raised as a PersistenceError (StoreUnavailableError on timeouts).
        """
        if not self.guard.try_reserve_seat(route_code):
            raise InventoryExhaustedError(route_code)

        try:
            return persist()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Booking write failed after reserving a seat on {route_code}, releasing it: {e!r}")
            self.release(
                route_code,
                booking_id=None,
                reason="seat reserved but booking was not saved; release failed",
            )
            if isinstance(e, DomainError):
                raise
            if isinstance(e, OperationalError):
                raise StoreUnavailableError() from e
            raise PersistenceError("Failed to create booking") from e

    def delete_then_release(self, route_code: str, booking_id: int, delete: Callable[[], None]) -> bool:
        """Run ``delete``, then give the booking's seat back.

        Returns whether the seat was released; a failed release is flagged,
        not raised.
        """
        delete()
        return self.release(
            route_code,
            booking_id=booking_id,
            reason="booking deleted but its seat was not released",
        )

    def release(self, route_code: str, booking_id: Optional[int], reason: str) -> bool:
        try:
            released = self.guard.release_seat(route_code)
        except (DomainError, SQLAlchemyError) as e:
            logger.opt(exception=e).error(f"Seat release on {route_code} raised")
            released = False

        if not released:
            self.flag(route_code, booking_id, reason)
        return released

    def flag(self, route_code: str, booking_id: Optional[int], reason: str) -> None:
        logger.warning(f"Flagging route {route_code} for seat reconciliation (booking {booking_id}): {reason}")
        try:
            self.db.add(SeatReconciliation(bus_route=route_code, booking_id=booking_id, reason=reason))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.opt(exception=e).critical(
                f"Could not record reconciliation for route {route_code} (booking {booking_id}); fix the seat count by hand"
            )
