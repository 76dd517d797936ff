"""
Bus & Seat Inventory Module

Buses, their stops, and the per-route seat counter.

Key Components:
- inventory.py: atomic seat reserve/release (the only path that decrements seats)
- service.py: bus CRUD keyed by route code, seat reset, batched availability upsert
- router.py: public availability and route endpoints
"""

from .router import router
from .inventory import InventoryGuard
from .service import BusService, upsert_availability

__all__ = [
    "router",
    "InventoryGuard",
    "BusService",
    "upsert_availability",
]
