# app/api/v1/endpoints/flights.py
"""
Flight endpoints.

- Local flight records saved against trips (CRUD, owner-or-admin mutations)
- Flight shopping and booking through the provider (search, pricing,
  seat maps, prediction, upsell, orders, reference lookups)
"""

from fastapi import APIRouter, Body, Depends, Query
from pydantic import ValidationError
from typing import Any, Dict, List, Optional
import logging

from app.api.v1.dependencies import get_current_user, get_flight_store, get_orchestrator
from app.core.security import can_modify
from app.models.models import User
from schemas.flight import Flight, FlightCreate, FlightUpdate, SearchCriteria
from services.exceptions import BadRequestError, ForbiddenError
from services.flight_store import FlightStore
from services.offer_orchestrator import OfferOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


def validation_message(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def search_criteria(
    origin: str = Query(..., description="Departure airport IATA code", examples=["JFK"]),
    destination: str = Query(..., description="Arrival airport IATA code", examples=["LAX"]),
    departure_date: str = Query(..., alias="departureDate", description="YYYY-MM-DD", examples=["2025-12-01"]),
    return_date: Optional[str] = Query(None, alias="returnDate", description="YYYY-MM-DD"),
    adults: Optional[str] = Query(None, description="Adult travelers; defaults to 1"),
    currency: Optional[str] = Query(None, description="ISO currency code; defaults to USD"),
    max_results: Optional[int] = Query(None, alias="max", description="Maximum offers (1-250)"),
) -> SearchCriteria:
    """Build normalized search criteria from query parameters (400 on bad input)."""
    try:
        return SearchCriteria(
            origin=origin,
            destination=destination,
            departure_date=departure_date,
            return_date=return_date or None,
            adults=adults,
            currency=currency,
            max=max_results,
        )
    except ValidationError as e:
        raise BadRequestError(validation_message(e))


# ==================== LOCAL FLIGHT RECORDS ====================

@router.post("", response_model=Flight, status_code=201)
async def create_flight(
    flight_in: FlightCreate,
    store: FlightStore = Depends(get_flight_store),
    current_user: User = Depends(get_current_user),
):
    """Save a flight against an existing trip. The caller becomes its owner."""
    return await store.create(flight_in, owner_id=current_user.id)


@router.get("", response_model=List[Flight])
async def find_flights(
    id: Optional[int] = Query(None, description="Flight id"),
    trip_id: Optional[int] = Query(None, alias="tripId", description="Trip id"),
    store: FlightStore = Depends(get_flight_store),
):
    """Flights matching the optional filters, in creation order. Empty list when none match."""
    return await store.find_all(id=id, trip_id=trip_id)


@router.get("/trip/{trip_id}", response_model=List[Flight])
async def get_flights_by_trip(trip_id: int, store: FlightStore = Depends(get_flight_store)):
    return await store.get_flights_by_trip(trip_id)


# ==================== SHOPPING ====================

@router.get("/offers", response_model=List[Dict[str, Any]])
async def search_offers(
    criteria: SearchCriteria = Depends(search_criteria),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.search_offers(criteria)


@router.post("/offers")
async def search_offers_raw(
    body: Dict[str, Any] = Body(...),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    """Provider search with a full request document (multi-city, filters)."""
    return await orchestrator.search_offers_raw(body)


@router.get("/offers/price")
async def price_first_offer(
    criteria: SearchCriteria = Depends(search_criteria),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    """Search, then confirm the price of the first offer returned."""
    return await orchestrator.price_confirmed_offer(criteria)


@router.post("/offers/price")
async def price_offers(
    body: Dict[str, Any] = Body(...),
    include_bags: bool = Query(True, alias="includeBags"),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.price_offers_raw(body, include_bags=include_bags)


@router.get("/offers/prediction")
async def predict_offers(
    criteria: SearchCriteria = Depends(search_criteria),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    """Search, then have the provider rank every offer found."""
    return await orchestrator.predict_offers(criteria)


@router.post("/offers/upselling")
async def upsell_offers(
    body: Dict[str, Any] = Body(...),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.upsell_offers(body)


@router.get("/seatmaps")
async def seat_map_for_search(
    criteria: SearchCriteria = Depends(search_criteria),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    """Search, then fetch the seat map of the first offer returned."""
    return await orchestrator.get_seat_map_for_criteria(criteria)


@router.post("/availabilities")
async def search_availabilities(
    body: Dict[str, Any] = Body(...),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.search_availabilities(body)


@router.get("/destinations")
async def search_destinations(
    origin: str = Query(..., examples=["MAD"]),
    departure_date: Optional[str] = Query(None, alias="departureDate"),
    one_way: Optional[bool] = Query(None, alias="oneWay"),
    max_price: Optional[int] = Query(None, alias="maxPrice", ge=0),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    """Cheapest destinations from an origin."""
    return await orchestrator.search_destinations(origin, departure_date, one_way, max_price)


@router.get("/dates")
async def search_dates(
    origin: str = Query(..., examples=["MAD"]),
    destination: str = Query(..., examples=["MUC"]),
    one_way: Optional[bool] = Query(None, alias="oneWay"),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    """Cheapest travel dates for a route."""
    return await orchestrator.search_dates(origin, destination, one_way)


@router.get("/airport-suggestions")
async def airport_suggestions(
    keyword: str = Query(..., min_length=1, examples=["lon"]),
    sub_type: str = Query("AIRPORT,CITY", alias="subType"),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.lookup_locations(keyword, sub_type)


@router.get("/airline/checkinLinks")
async def checkin_links(
    airline_code: str = Query(..., alias="airlineCode", min_length=2, max_length=3),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.lookup_checkin_links(airline_code)


@router.get("/status")
async def flight_status(
    carrier_code: str = Query(..., alias="carrierCode", min_length=2, max_length=3),
    flight_number: str = Query(..., alias="flightNumber", min_length=1, max_length=4),
    scheduled_departure_date: str = Query(..., alias="scheduledDepartureDate"),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.get_flight_status(carrier_code, flight_number, scheduled_departure_date)


# ==================== ORDERS ====================

@router.post("/orders")
async def create_order(
    body: Dict[str, Any] = Body(...),
    orchestrator: OfferOrchestrator = Depends(get_orchestrator),
):
    """Book a priced offer. The order is not copied into the trip's flights."""
    return await orchestrator.create_order(body)


@router.get("/orders/{order_id}/seatmap")
async def seat_map_for_order(order_id: str, orchestrator: OfferOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.get_seat_map_for_order(order_id)


@router.get("/orders/{order_id}")
async def get_order(order_id: str, orchestrator: OfferOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.get_order(order_id)


@router.delete("/orders/{order_id}")
async def cancel_order(order_id: str, orchestrator: OfferOrchestrator = Depends(get_orchestrator)):
    await orchestrator.cancel_order(order_id)
    return {"deleted": order_id}


# ==================== OWNER-SCOPED MUTATIONS ====================

@router.patch("/{flight_id}", response_model=Flight)
async def update_flight(
    flight_id: int,
    flight_in: FlightUpdate,
    store: FlightStore = Depends(get_flight_store),
    current_user: User = Depends(get_current_user),
):
    flight = await store.get(flight_id)
    if not can_modify(current_user.id, flight.owner_id, current_user.is_admin):
        raise ForbiddenError("Only the flight's owner or an admin can change it")
    return await store.update(flight_id, flight_in)


@router.delete("/{flight_id}")
async def delete_flight(
    flight_id: int,
    store: FlightStore = Depends(get_flight_store),
    current_user: User = Depends(get_current_user),
):
    flight = await store.get(flight_id)
    if not can_modify(current_user.id, flight.owner_id, current_user.is_admin):
        logger.warning("User %s denied delete of flight %s", current_user.id, flight_id)
        raise ForbiddenError("Only the flight's owner or an admin can delete it")
    await store.remove(flight_id)
    return {"deleted": flight_id}
