from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, Date, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from src.database import Base

# SQLite only autoincrements INTEGER primary keys
IdType = BigInteger().with_variant(Integer, "sqlite")

# ================================
# Buses & Routes
# ================================
class Bus(Base):
    __tablename__ = "buses"

    id = Column(IdType, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    route_code = Column(String(50), unique=True, nullable=False, index=True)
    total_seats = Column(Integer, nullable=False, default=10)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    stops = relationship(
        "RouteStop",
        back_populates="bus",
        cascade="all, delete-orphan",
        order_by="RouteStop.sequence",
    )

class RouteStop(Base):
    __tablename__ = "route_stops"

    id = Column(IdType, primary_key=True, index=True)
    bus_id = Column(IdType, ForeignKey("buses.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    fare = Column(Integer, nullable=False, default=0)  # minor units
    sequence = Column(Integer, nullable=False, default=0)

    # Relationships
    bus = relationship("Bus", back_populates="stops")

class BusAvailability(Base):
    __tablename__ = "bus_availability"

    id = Column(IdType, primary_key=True, index=True)
    bus_route = Column(String(50), unique=True, nullable=False, index=True)
    available_seats = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

# ================================
# Bookings
# ================================
class Booking(Base):
    __tablename__ = "bookings"

    id = Column(IdType, primary_key=True, index=True)
    admission_number = Column(String(7), nullable=False, index=True)
    student_name = Column(String(255), nullable=False)
    bus_route = Column(String(50), nullable=False, index=True)
    destination = Column(String(255), nullable=False)
    payment_status = Column(Boolean, nullable=False, default=False, index=True)
    payment_reference = Column(String(100), unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

class SeatReconciliation(Base):
    __tablename__ = "seat_reconciliations"

    id = Column(IdType, primary_key=True, index=True)
    bus_route = Column(String(50), nullable=False, index=True)
    booking_id = Column(BigInteger)
    reason = Column(Text, nullable=False)
    resolved = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    resolved_at = Column(DateTime(timezone=True))

# ================================
# Admin
# ================================
class AdminSettings(Base):
    __tablename__ = "admin_settings"

    SINGLETON_ID = 1

    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    booking_enabled = Column(Boolean, nullable=False, default=False)
    go_date = Column(Date)
    return_date = Column(Date)
    current_bookings = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

class AdminUser(Base):
    __tablename__ = "admin_users"

    id = Column(IdType, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
