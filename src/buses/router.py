from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Dict, List, Optional

from src.database import get_db
from src.buses.schemas import Bus as BusSchema, RouteStop as RouteStopSchema
from src.buses.service import BusService
from src.models import Bus

router = APIRouter()

def build_bus_detail(bus: Bus, availability: Dict[str, int]) -> BusSchema:
    """Combine a bus row with its route's current seat count"""
    return BusSchema(
        id=bus.id,
        name=bus.name,
        route_code=bus.route_code,
        total_seats=bus.total_seats,
        is_active=bus.is_active,
        available_seats=availability.get(bus.route_code),
        stops=[RouteStopSchema.model_validate(stop) for stop in bus.stops],
        created_at=bus.created_at,
        updated_at=bus.updated_at,
    )

@router.get("/availability", response_model=Dict[str, int])
def get_seat_availability(db: Session = Depends(get_db)):
    """Available seats for every route"""
    return BusService(db).get_availability()

@router.get("", response_model=List[BusSchema])
def list_active_buses(db: Session = Depends(get_db)):
    """Buses a student can currently pick"""
    service = BusService(db)
    availability = service.get_availability()
    return [build_bus_detail(bus, availability) for bus in service.list_buses(active_only=True)]

@router.get("/{route_code}/stops", response_model=List[RouteStopSchema])
def get_route_stops(route_code: str, db: Session = Depends(get_db)):
    """Destinations served by a route"""
    return BusService(db).get_stops(route_code)
