# app/models/models.py

from sqlalchemy import (
    Column, String, Integer, Float, ForeignKey,
    DateTime, JSON, Date, Boolean, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.database import Base


# ==========================
# CORE: USERS
# ==========================

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    trips = relationship("Trip", back_populates="user", cascade="all, delete-orphan")


# ==========================
# TRIPS
# ==========================

class Trip(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="trips")
    flights = relationship("Flight", back_populates="trip", order_by="Flight.id")


# ==========================
# FLIGHTS
# ==========================

class Flight(Base):
    """A flight leg selected or booked for a trip."""
    __tablename__ = "flights"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    origin = Column(String(3), nullable=False)
    destination = Column(String(3), nullable=False)
    departure_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=True)

    carrier_code = Column(String(3), nullable=True)
    flight_number = Column(String(10), nullable=True)

    price = Column(Float, nullable=True)
    currency = Column(String(3), nullable=True)

    # Offer payload copied verbatim from the provider at creation time
    offer = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    trip = relationship("Trip", back_populates="flights")

    __table_args__ = (
        Index('idx_flight_route', 'origin', 'destination', 'departure_date'),
    )
