from sqlalchemy import func, select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from src.exceptions import StoreUnavailableError
from src.logger_config import logger
from src.models import Bus, BusAvailability


class InventoryGuard:
    """Atomic seat counter for a route.

    Every mutation is a single conditional UPDATE committed in its own
    transaction, so the check and the write cannot be interleaved by another
    request. The database is the only lock.
    """

    def __init__(self, db: Session):
        self.db = db

    def try_reserve_seat(self, route_code: str) -> bool:
        """Take one seat if any remain. False when sold out or the route is unknown."""
        stmt = (
            update(BusAvailability)
            .where(
                BusAvailability.bus_route == route_code,
                BusAvailability.available_seats > 0,
            )
            .values(
                available_seats=BusAvailability.available_seats - 1,
                updated_at=func.now(),
            )
            .execution_options(synchronize_session=False)
        )
        reserved = self._execute(stmt, route_code) == 1

        if reserved:
            logger.info(f"Reserved seat on route {route_code}")
        else:
            logger.info(f"No seat available on route {route_code}")
        return reserved

    def release_seat(self, route_code: str) -> bool:
        """Give one seat back, never above the bus's total_seats."""
        capacity = (
            select(Bus.total_seats)
            .where(Bus.route_code == route_code)
            .scalar_subquery()
        )
        stmt = (
            update(BusAvailability)
            .where(
                BusAvailability.bus_route == route_code,
                BusAvailability.available_seats < func.coalesce(capacity, 0),
            )
            .values(
                available_seats=BusAvailability.available_seats + 1,
                updated_at=func.now(),
            )
            .execution_options(synchronize_session=False)
        )
        released = self._execute(stmt, route_code) == 1

        if released:
            logger.info(f"Released seat on route {route_code}")
        else:
            logger.warning(f"Seat release skipped on route {route_code}: route unknown or already at capacity")
        return released

    def available_seats(self, route_code: str):
        return self.db.query(BusAvailability.available_seats).filter(
            BusAvailability.bus_route == route_code
        ).scalar()

    def _execute(self, stmt, route_code: str) -> int:
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except OperationalError as e:
            self.db.rollback()
            logger.error(f"Seat update on route {route_code} timed out or lost its connection: {e.orig}")
            raise StoreUnavailableError() from e
        return result.rowcount
