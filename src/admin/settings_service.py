from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.admin.schemas import BookingSettings, SettingsResponse, SettingsUpdate
from src.buses.service import BusService, upsert_availability
from src.exceptions import PersistenceError
from src.logger_config import logger
from src.models import AdminSettings


class SettingsService:
    """Load and save the singleton booking settings row.

    ``load`` never writes: a missing row reads as the defaults (booking
    closed). ``save`` and ``update_settings`` create the row on first write.
    """

    def __init__(self, db: Session):
        self.db = db

    def load(self) -> BookingSettings:
        row = self.db.get(AdminSettings, AdminSettings.SINGLETON_ID)
        if row is None:
            return BookingSettings()
        return BookingSettings.model_validate(row)

    def save(self, config: BookingSettings) -> None:
        self._write(config)
        self._commit()

    def is_booking_enabled(self) -> bool:
        return self.load().booking_enabled

    def get_settings(self) -> SettingsResponse:
        config = self.load()
        return SettingsResponse(
            booking_enabled=config.booking_enabled,
            go_date=config.go_date,
            return_date=config.return_date,
            bus_availability=BusService(self.db).get_availability(),
            current_bookings=config.current_bookings,
        )

    def update_settings(self, update: SettingsUpdate) -> SettingsResponse:
        """Apply a partial update to the settings row and route seat counts in one transaction.

        Seat counts set here are an administrative override: they are written
        as given, not checked against outstanding bookings.
        """
        changes = update.dict(exclude_unset=True)
        seats_by_route = changes.pop("bus_availability", None) or {}
        if changes.get("booking_enabled") is None:
            changes.pop("booking_enabled", None)

        config = self.load().model_copy(update=changes)
        self._write(config)
        upsert_availability(self.db, seats_by_route)
        self._commit()

        logger.info(
            f"Settings updated: booking_enabled={config.booking_enabled}, "
            f"routes overridden={sorted(seats_by_route)}"
        )
        return self.get_settings()

    def _write(self, config: BookingSettings) -> None:
        row = self.db.get(AdminSettings, AdminSettings.SINGLETON_ID)
        if row is None:
            row = AdminSettings(id=AdminSettings.SINGLETON_ID, current_bookings=0)
            self.db.add(row)

        row.booking_enabled = config.booking_enabled
        row.go_date = config.go_date
        row.return_date = config.return_date

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise PersistenceError("Settings were changed concurrently, please retry") from e
