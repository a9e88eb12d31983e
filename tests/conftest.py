"""
Shared fixtures: in-memory database, seeded users/trips, a fake provider and
an HTTP client wired to both.
"""

import asyncio
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AMADEUS_API_KEY", "test-key")
os.environ.setdefault("AMADEUS_API_SECRET", "test-secret")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.v1.dependencies import get_provider_client
from app.core.security import create_access_token
from app.db.database import Base, get_db
from app.main import app
from app.models.models import Trip, User


def make_offer(offer_id: str, origin: str = "JFK", destination: str = "LAX", total: str = "199.99"):
    return {
        "type": "flight-offer",
        "id": offer_id,
        "source": "GDS",
        "itineraries": [
            {
                "duration": "PT6H",
                "segments": [
                    {
                        "departure": {"iataCode": origin, "at": "2025-12-01T08:00:00"},
                        "arrival": {"iataCode": destination, "at": "2025-12-01T11:00:00"},
                        "carrierCode": "AA",
                        "number": "100" + offer_id,
                    }
                ],
            }
        ],
        "price": {"currency": "USD", "total": total, "grandTotal": total},
    }


def http_status_error(status: int, detail: str = "Provider rejected the request") -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://test.api.amadeus.com/v2/shopping/flight-offers")
    response = httpx.Response(status, json={"errors": [{"status": status, "detail": detail}]}, request=request)
    return httpx.HTTPStatusError(detail, request=request, response=response)


class FakeProvider:
    """Stands in for AmadeusClient; records every call in order."""

    def __init__(self, offers=None):
        self.offers = offers if offers is not None else [make_offer("1"), make_offer("2"), make_offer("3")]
        self.calls = []
        self.failures = {}
        self.delays = {}
        self.responses = {}

    async def _respond(self, name, payload, default):
        self.calls.append((name, payload))
        if name in self.delays:
            await asyncio.sleep(self.delays[name])
        if name in self.failures:
            raise self.failures[name]
        return self.responses.get(name, default)

    def called(self, name):
        return [payload for call, payload in self.calls if call == name]

    async def search_offers(self, params):
        return await self._respond(
            "search_offers", params,
            {"meta": {"count": len(self.offers)}, "data": list(self.offers), "dictionaries": {"carriers": {"AA": "AMERICAN AIRLINES"}}},
        )

    async def search_offers_post(self, body):
        return await self._respond("search_offers_post", body, {"data": list(self.offers)})

    async def search_offer_dates(self, params):
        return await self._respond("search_offer_dates", params, {"data": [{"type": "flight-date"}]})

    async def search_destinations(self, params):
        return await self._respond("search_destinations", params, {"data": [{"type": "flight-destination"}]})

    async def price_offers(self, body, include=None):
        offers = body.get("data", {}).get("flightOffers", [])
        return await self._respond(
            "price_offers", {"body": body, "include": include},
            {"data": {"type": "flight-offers-pricing", "flightOffers": offers}},
        )

    async def get_seat_maps(self, body):
        return await self._respond("get_seat_maps", body, {"data": [{"type": "seatmap", "flightOfferId": body["data"][0]["id"]}]})

    async def get_order_seat_maps(self, order_id):
        return await self._respond("get_order_seat_maps", order_id, {"data": [{"type": "seatmap"}]})

    async def predict_offers(self, body):
        return await self._respond("predict_offers", body, {"data": body["data"]})

    async def upsell_offers(self, body):
        return await self._respond("upsell_offers", body, {"data": [{"type": "flight-offer", "id": "upsold"}]})

    async def search_availabilities(self, body):
        return await self._respond("search_availabilities", body, {"data": [{"type": "flight-availability"}]})

    async def create_order(self, body):
        return await self._respond("create_order", body, {"data": {"type": "flight-order", "id": "ORDER1"}})

    async def get_order(self, order_id):
        return await self._respond("get_order", order_id, {"data": {"type": "flight-order", "id": order_id}})

    async def cancel_order(self, order_id):
        return await self._respond("cancel_order", order_id, {})

    async def lookup_locations(self, params):
        return await self._respond("lookup_locations", params, {"data": [{"iataCode": "LHR"}]})

    async def lookup_checkin_links(self, params):
        return await self._respond("lookup_checkin_links", params, {"data": [{"type": "checkin-link"}]})

    async def get_flight_status(self, params):
        return await self._respond("get_flight_status", params, {"data": [{"type": "DatedFlight"}]})


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        session.add_all([
            User(id=1, username="owner", email="owner@ranner.dev"),
            User(id=2, username="stranger", email="stranger@ranner.dev"),
            User(id=3, username="admin", email="admin@ranner.dev", is_admin=True),
        ])
        session.add_all([
            Trip(id=1, user_id=1, name="West coast"),
            Trip(id=2, user_id=1, name="Europe"),
        ])
        await session.commit()

    yield factory
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory, provider):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_provider_client] = lambda: provider

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_header(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
