import pytest
from pydantic import ValidationError

from app.core.security import can_modify
from app.mappers.offer_mapper import flight_fields_from_offer
from conftest import make_offer
from schemas.flight import FlightCreate, FlightUpdate, SearchCriteria

pytestmark = pytest.mark.unit


def test_criteria_upper_cases_codes():
    c = SearchCriteria(origin=" jfk", destination="lax", departureDate="2025-12-01")
    assert (c.origin, c.destination) == ("JFK", "LAX")


@pytest.mark.parametrize("adults, expected", [(None, 1), ("", 1), ("abc", 1), ("3", 3), (2, 2)])
def test_criteria_adults_default(adults, expected):
    c = SearchCriteria(origin="JFK", destination="LAX", departure_date="2025-12-01", adults=adults)
    assert c.adults == expected


def test_criteria_currency_default_and_case():
    assert SearchCriteria(origin="JFK", destination="LAX", departure_date="2025-12-01").currency == "USD"
    assert SearchCriteria(origin="JFK", destination="LAX", departure_date="2025-12-01", currency="eur").currency == "EUR"


@pytest.mark.parametrize("bad", [
    {"origin": "JF"},
    {"destination": "LAX1"},
    {"departure_date": "12/01/2025"},
    {"return_date": "2025-11-30"},
    {"adults": "12"},
    {"currency": "DOLLARS"},
])
def test_criteria_rejects_bad_input(bad):
    values = {"origin": "JFK", "destination": "LAX", "departure_date": "2025-12-01"}
    values.update(bad)
    with pytest.raises(ValidationError):
        SearchCriteria(**values)


def test_provider_params_include_optional_fields_only_when_set():
    c = SearchCriteria(origin="JFK", destination="LAX", departure_date="2025-12-01", return_date="2025-12-05", max=10)
    assert c.to_provider_params() == {
        "originLocationCode": "JFK",
        "destinationLocationCode": "LAX",
        "departureDate": "2025-12-01",
        "returnDate": "2025-12-05",
        "adults": 1,
        "currencyCode": "USD",
        "max": 10,
    }


def test_offer_mapper_reads_round_trip_offer():
    offer = make_offer("1")
    offer["itineraries"].append({
        "segments": [{
            "departure": {"iataCode": "LAX", "at": "2025-12-08T09:00:00"},
            "arrival": {"iataCode": "JFK", "at": "2025-12-08T17:00:00"},
            "carrierCode": "AA",
            "number": "200",
        }]
    })

    fields = flight_fields_from_offer(offer)

    assert fields["origin"] == "JFK"
    assert fields["destination"] == "LAX"
    assert fields["departure_date"] == "2025-12-01"
    assert fields["return_date"] == "2025-12-08"
    assert fields["price"] == 199.99


def test_offer_mapper_skips_malformed_parts():
    assert flight_fields_from_offer({"itineraries": [], "price": {"total": "n/a"}}) == {}
    assert flight_fields_from_offer("not an offer") == {}


def test_explicit_fields_win_over_offer():
    created = FlightCreate(tripId=1, origin="EWR", offer=make_offer("1"))
    assert created.origin == "EWR"
    assert created.destination == "LAX"


def test_create_requires_trip():
    with pytest.raises(ValidationError):
        FlightCreate(origin="JFK", destination="LAX", departure_date="2025-12-01")


def test_update_cannot_move_flight_to_another_trip():
    with pytest.raises(ValidationError):
        FlightUpdate(tripId=2)


@pytest.mark.parametrize("actor, owner, admin, allowed", [
    (1, 1, False, True),
    (2, 1, False, False),
    (3, 1, True, True),
    (None, 1, False, False),
    (None, None, False, False),
])
def test_can_modify(actor, owner, admin, allowed):
    assert can_modify(actor, owner, admin) is allowed
