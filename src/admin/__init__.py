"""
Admin System Module

Administrative functionality for the Bus Pass Booking System:

- Booking switch and travel dates
- Per-route seat overrides and seat reset
- Bus and stop management
- Booking review, payment status updates and deletion
- Reconciliation of seat counts after failed releases

Every endpoint requires an admin bearer token from ``/admin/login``.
"""

from . import router, schemas, admin_service, settings_service

__all__ = [
    "router",
    "schemas",
    "admin_service",
    "settings_service"
]
