from datetime import datetime
from io import BytesIO
import base64
import hashlib
import hmac
import json

import qrcode
from qrcode import constants
from sqlalchemy.orm import Session

from src.admin.settings_service import SettingsService
from src.bookings.schemas import Booking as BookingSchema, Ticket
from src.buses.service import BusService
from src.config import settings
from src.models import Booking

class TicketService:
    """Builds the student's ticket with a signed code and QR image"""

    def __init__(self, db: Session):
        self.db = db
        self.settings_service = SettingsService(db)
        self.bus_service = BusService(db)

    def build_ticket(self, booking: Booking) -> Ticket:
        """Ticket for a stored booking"""

        config = self.settings_service.load()
        bus = self.bus_service.find_bus(booking.bus_route)

        fare = None
        if bus is not None:
            for stop in bus.stops:
                if stop.name.lower() == booking.destination.lower():
                    fare = stop.fare
                    break

        ticket_code = self.ticket_code(booking)

        return Ticket(
            booking=BookingSchema.model_validate(booking),
            bus_name=bus.name if bus else None,
            fare=fare,
            go_date=config.go_date,
            return_date=config.return_date,
            ticket_code=ticket_code,
            qr_code=self._qr_data_uri(self._qr_payload(booking, ticket_code)),
            issued_at=datetime.now(),
        )

    def ticket_code(self, booking: Booking) -> str:
        message = f"{booking.id}:{booking.admission_number}:{booking.bus_route}".encode()
        digest = hmac.new(settings.SECRET_KEY.encode(), message, hashlib.sha256).hexdigest()
        return digest[:16].upper()

    def verify_ticket_code(self, booking: Booking, code: str) -> bool:
        return hmac.compare_digest(self.ticket_code(booking).encode(), code.strip().upper().encode())

    def _qr_payload(self, booking: Booking, ticket_code: str) -> str:
        data = {
            "v": "1",
            "bid": booking.id,
            "adm": booking.admission_number,
            "route": booking.bus_route,
            "dest": booking.destination,
            "paid": booking.payment_status,
            "code": ticket_code,
        }
        return json.dumps(data, separators=(',', ':'))

    def _qr_data_uri(self, payload: str) -> str:
        qr = qrcode.QRCode(
            version=None,
            error_correction=constants.ERROR_CORRECT_M,
            box_size=8,
            border=4,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        image = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        image.save(buffer)

        encoded = base64.b64encode(buffer.getvalue()).decode()
        return f"data:image/png;base64,{encoded}"
