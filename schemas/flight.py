from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.core.config import settings
from app.mappers.offer_mapper import flight_fields_from_offer


def normalize_iata_code(value: Any, field_name: str = "code") -> str:
    """Validate a 3-letter IATA code and upper-case it."""
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a 3-letter IATA code")
    code = value.strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValueError(f"{field_name} must be a 3-letter IATA code")
    return code


class CamelModel(BaseModel):
    """Accepts and renders camelCase keys; snake_case is accepted on input too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Search ---

class SearchCriteria(CamelModel):
    """Flight-offer search parameters, normalized for the provider."""
    origin: str
    destination: str
    departure_date: date
    return_date: Optional[date] = None
    adults: int = Field(1, ge=1, le=9)
    currency: str = settings.DEFAULT_CURRENCY
    max: Optional[int] = Field(None, ge=1, le=250)

    @field_validator("origin", "destination", mode="before")
    @classmethod
    def _iata(cls, v, info):
        return normalize_iata_code(v, info.field_name)

    @field_validator("adults", mode="before")
    @classmethod
    def _default_adults(cls, v):
        # absent or non-numeric -> one adult
        if v is None or isinstance(v, bool):
            return 1
        try:
            return int(str(v).strip())
        except ValueError:
            return 1

    @field_validator("currency", mode="before")
    @classmethod
    def _default_currency(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return settings.DEFAULT_CURRENCY
        code = str(v).strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError("currency must be a 3-letter ISO code")
        return code

    @model_validator(mode="after")
    def _check_dates(self):
        if self.return_date and self.return_date < self.departure_date:
            raise ValueError("returnDate cannot be before departureDate")
        return self

    def to_provider_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "originLocationCode": self.origin,
            "destinationLocationCode": self.destination,
            "departureDate": self.departure_date.isoformat(),
            "adults": self.adults,
            "currencyCode": self.currency,
        }
        if self.return_date:
            params["returnDate"] = self.return_date.isoformat()
        if self.max:
            params["max"] = self.max
        return params


# --- Local flight records ---

class FlightBase(CamelModel):
    origin: str
    destination: str
    departure_date: date
    return_date: Optional[date] = None
    carrier_code: Optional[str] = Field(None, max_length=3)
    flight_number: Optional[str] = Field(None, max_length=10)
    price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    offer: Optional[Dict[str, Any]] = None

    @field_validator("origin", "destination", mode="before")
    @classmethod
    def _iata(cls, v, info):
        return normalize_iata_code(v, info.field_name)

    @field_validator("carrier_code", "currency", mode="before")
    @classmethod
    def _upper(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


class FlightCreate(FlightBase):
    """
    Request body for saving a flight against a trip.

    When ``offer`` is supplied, route, dates, carrier and price are taken from
    it unless given explicitly.
    """
    model_config = ConfigDict(extra="forbid")

    trip_id: int

    @model_validator(mode="before")
    @classmethod
    def _fill_from_offer(cls, data):
        if isinstance(data, dict) and isinstance(data.get("offer"), dict):
            derived = flight_fields_from_offer(data["offer"])
            merged = dict(data)
            for field, value in derived.items():
                if field not in merged and to_camel(field) not in merged:
                    merged[field] = value
            return merged
        return data


class FlightUpdate(CamelModel):
    """Partial update. trip, id and owner are not part of the schema."""
    model_config = ConfigDict(extra="forbid")

    origin: Optional[str] = None
    destination: Optional[str] = None
    departure_date: Optional[date] = None
    return_date: Optional[date] = None
    carrier_code: Optional[str] = Field(None, max_length=3)
    flight_number: Optional[str] = Field(None, max_length=10)
    price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    offer: Optional[Dict[str, Any]] = None

    @field_validator("origin", "destination", mode="before")
    @classmethod
    def _iata(cls, v, info):
        if v is None:
            return v
        return normalize_iata_code(v, info.field_name)

    @field_validator("carrier_code", "currency", mode="before")
    @classmethod
    def _upper(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


class Flight(FlightBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    trip_id: int
    owner_id: Optional[int] = None
    created_at: Optional[datetime] = None
