# services/flight_store.py
"""
Persistence for flights saved against trips.

The store does no authorization; callers check ownership first. Each public
operation commits at most once, so it is atomic on its own, but sequences of
operations from different callers are not serialized.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.models import Flight, Trip
from schemas.flight import FlightCreate, FlightUpdate
from services.exceptions import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


class FlightStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: FlightCreate, owner_id: Optional[int]) -> Flight:
        trip = await self.db.get(Trip, data.trip_id)
        if trip is None:
            raise NotFoundError(f"No trip: {data.trip_id}")

        flight = Flight(**data.model_dump(), owner_id=owner_id)
        self.db.add(flight)
        await self.db.commit()
        await self.db.refresh(flight)
        logger.info("Flight %s created on trip %s by user %s", flight.id, flight.trip_id, owner_id)
        return flight

    async def find_all(self, id: Optional[int] = None, trip_id: Optional[int] = None) -> List[Flight]:
        """All flights matching the given filters, in insertion order."""
        query = select(Flight)
        if id is not None:
            query = query.where(Flight.id == id)
        if trip_id is not None:
            query = query.where(Flight.trip_id == trip_id)
        result = await self.db.execute(query.order_by(Flight.id))
        return list(result.scalars().all())

    async def get_flights_by_trip(self, trip_id: int) -> List[Flight]:
        return await self.find_all(trip_id=trip_id)

    async def get(self, id: int) -> Flight:
        flight = await self.db.get(Flight, id)
        if flight is None:
            raise NotFoundError(f"No flight: {id}")
        return flight

    async def update(self, id: int, data: FlightUpdate) -> Flight:
        flight = await self.get(id)

        changes = data.model_dump(exclude_unset=True)
        for field in ("origin", "destination", "departure_date"):
            if field in changes and changes[field] is None:
                raise BadRequestError(f"{field} cannot be null")

        for field, value in changes.items():
            setattr(flight, field, value)

        departure, ret = flight.departure_date, flight.return_date
        if ret is not None and ret < departure:
            await self.db.rollback()
            raise BadRequestError("returnDate cannot be before departureDate")

        await self.db.commit()
        await self.db.refresh(flight)
        logger.info("Flight %s updated: %s", id, ", ".join(changes) or "no changes")
        return flight

    async def remove(self, id: int) -> None:
        flight = await self.get(id)
        await self.db.delete(flight)
        await self.db.commit()
        logger.info("Flight %s removed", id)
