from typing import Dict, List, Optional
from sqlalchemy import case, func, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from src.buses.schemas import BusCreate, BusUpdate, RouteStopCreate
from src.config import settings
from src.exceptions import ConflictError, NotFoundError, PersistenceError
from src.logger_config import logger
from src.models import Booking, Bus, BusAvailability, RouteStop

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

def upsert_availability(db: Session, seats_by_route: Dict[str, int]) -> None:
    """Set the seat count of many routes with one INSERT ... ON CONFLICT statement.

    Runs inside the caller's transaction; the caller commits.
    """
    if not seats_by_route:
        return

    dialect = db.get_bind().dialect.name
    insert = _UPSERT_DIALECTS.get(dialect)
    if insert is None:
        logger.error(f"Batched availability upsert is not supported on {dialect}")
        raise PersistenceError(f"Seat counts cannot be updated on a {dialect} database")

    rows = [
        {"bus_route": route, "available_seats": seats}
        for route, seats in seats_by_route.items()
    ]
    stmt = insert(BusAvailability).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=[BusAvailability.bus_route],
        set_={
            "available_seats": stmt.excluded.available_seats,
            "updated_at": func.now(),
        },
    )
    db.execute(stmt)

class BusService:
    """Bus and route management"""

    def __init__(self, db: Session):
        self.db = db

    def list_buses(self, active_only: bool = False) -> List[Bus]:
        query = self.db.query(Bus).options(selectinload(Bus.stops))
        if active_only:
            query = query.filter(Bus.is_active == True)
        return query.order_by(Bus.created_at, Bus.id).all()

    def get_bus(self, route_code: str) -> Bus:
        bus = self.db.query(Bus).options(selectinload(Bus.stops)).filter(
            Bus.route_code == route_code
        ).first()
        if not bus:
            raise NotFoundError(f"Bus route {route_code} not found")
        return bus

    def find_bus(self, route_code: str) -> Optional[Bus]:
        return self.db.query(Bus).filter(Bus.route_code == route_code).first()

    def get_stops(self, route_code: str) -> List[RouteStop]:
        return self.get_bus(route_code).stops

    def get_availability(self) -> Dict[str, int]:
        """Available seats keyed by route code"""
        rows = self.db.query(BusAvailability.bus_route, BusAvailability.available_seats).all()
        return {route: seats for route, seats in rows}

    def create_bus(self, bus_data: BusCreate) -> Bus:
        """Create a bus and open its route with every seat available"""

        existing = self.db.query(Bus.id).filter(Bus.route_code == bus_data.route_code).first()
        if existing:
            raise ConflictError("Bus with this route code already exists")

        total_seats = bus_data.total_seats
        if total_seats is None:
            total_seats = settings.DEFAULT_BUS_SEATS

        bus = Bus(
            name=bus_data.name,
            route_code=bus_data.route_code,
            total_seats=total_seats,
            is_active=bus_data.is_active,
            stops=self._build_stops(bus_data.stops),
        )
        self.db.add(bus)

        try:
            self.db.flush()
            upsert_availability(self.db, {bus.route_code: total_seats})
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Bus with this route code already exists")

        self.db.refresh(bus)
        logger.info(f"Created bus {bus.name} on route {bus.route_code} with {total_seats} seats")
        return bus

    def update_bus(self, route_code: str, update_data: BusUpdate) -> Bus:
        """Update a bus; a capacity change moves available seats by the same amount"""

        bus = self.get_bus(route_code)
        changes = update_data.dict(exclude_unset=True)

        if changes.get("name") is not None:
            bus.name = changes["name"]

        if changes.get("is_active") is not None:
            bus.is_active = changes["is_active"]

        if update_data.stops is not None:
            bus.stops = self._build_stops(update_data.stops)

        new_total = changes.get("total_seats")
        if new_total is not None and new_total != bus.total_seats:
            self._shift_capacity(route_code, new_total - bus.total_seats, new_total)
            bus.total_seats = new_total

        self.db.commit()
        self.db.refresh(bus)
        return bus

    def delete_bus(self, route_code: str) -> int:
        """Delete a bus with its stops, availability row and bookings"""

        bus = self.get_bus(route_code)

        removed_bookings = self.db.query(Booking).filter(
            Booking.bus_route == route_code
        ).delete(synchronize_session=False)
        self.db.query(BusAvailability).filter(
            BusAvailability.bus_route == route_code
        ).delete(synchronize_session=False)
        self.db.delete(bus)
        self.db.commit()

        logger.info(f"Deleted bus route {route_code} and {removed_bookings} bookings")
        return removed_bookings

    def reset_all_seats(self) -> Dict[str, int]:
        """Refill every active route to its bus's total seats"""

        seats_by_route = {
            route: total
            for route, total in self.db.query(Bus.route_code, Bus.total_seats).filter(
                Bus.is_active == True
            ).all()
        }
        upsert_availability(self.db, seats_by_route)
        self.db.commit()

        logger.info(f"Reset seats on {len(seats_by_route)} routes")
        return seats_by_route

    def _shift_capacity(self, route_code: str, delta: int, new_total: int) -> None:
        shifted = BusAvailability.available_seats + delta
        self.db.execute(
            update(BusAvailability)
            .where(BusAvailability.bus_route == route_code)
            .values(
                available_seats=case(
                    (shifted < 0, 0),
                    (shifted > new_total, new_total),
                    else_=shifted,
                ),
                updated_at=func.now(),
            )
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _build_stops(stops: List[RouteStopCreate]) -> List[RouteStop]:
        return [
            RouteStop(name=stop.name.strip(), fare=stop.fare, sequence=index)
            for index, stop in enumerate(stops)
        ]
