# services/offer_orchestrator.py
"""
Flight-offer orchestration.

Composes provider calls into the multi-step shopping workflows:

- price confirmation: search -> first offer -> pricing
- seat map:           search -> first offer -> seat maps
- prediction:         search -> whole search response -> prediction

Search results are ephemeral (fares and availability move between calls), so
each workflow reuses the one search response it obtained and never re-queries.
Steps within a workflow run strictly one after another.

Every provider failure is re-raised as ``ProviderError`` tagged with the stage
that failed. Calls are bounded by a deadline and are never retried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional

import httpx

from app.core.config import settings
from schemas.flight import SearchCriteria, normalize_iata_code
from services.exceptions import (
    BadRequestError,
    NoOffersFoundError,
    ProviderError,
    ProviderStage,
    ProviderTimeoutError,
)

logger = logging.getLogger(__name__)

MALFORMED_RESPONSE = "Malformed provider response"


def _provider_error_message(response: httpx.Response) -> str:
    """Pull the human-readable detail out of an Amadeus error document."""
    try:
        body = response.json()
        errors = body.get("errors") or []
        if errors:
            first = errors[0]
            return first.get("detail") or first.get("title") or response.reason_phrase
    except (ValueError, AttributeError):
        pass
    return response.reason_phrase or f"Provider returned HTTP {response.status_code}"


class OfferOrchestrator:
    """Runs flight shopping and booking workflows against an injected provider client."""

    def __init__(self, client, timeout_s: Optional[float] = None):
        self.client = client
        self.timeout_s = timeout_s or settings.PROVIDER_TIMEOUT_S

    # ---------------------------
    # Boundary
    # ---------------------------
    async def _call(self, stage: ProviderStage, call: Awaitable[Any], *, expect_data: bool = True) -> Any:
        logger.info("Provider call: stage=%s", stage.value)
        try:
            result = await asyncio.wait_for(call, timeout=self.timeout_s)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error("Provider %s timed out: %s", stage.value, e)
            raise ProviderTimeoutError(stage) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = _provider_error_message(e.response)
            logger.error("Provider %s failed: %s %s", stage.value, status, message)
            # provider auth failures concern our credentials, not the caller
            forwarded = status if status >= 400 and status not in (401, 403) else 500
            raise ProviderError(stage, message, status=forwarded) from e
        except httpx.HTTPError as e:
            logger.error("Provider %s transport error: %s", stage.value, e)
            raise ProviderError(stage, str(e) or "Flight provider request failed") from e
        except (ValueError, KeyError) as e:
            # undecodable body or token document
            logger.error("Provider %s returned an unreadable response: %s", stage.value, e)
            raise ProviderError(stage, MALFORMED_RESPONSE) from e

        if not isinstance(result, dict) or (expect_data and "data" not in result):
            logger.error("Provider %s returned a malformed response", stage.value)
            raise ProviderError(stage, MALFORMED_RESPONSE)
        return result

    # ---------------------------
    # Search
    # ---------------------------
    async def _search(self, criteria: SearchCriteria) -> Dict[str, Any]:
        """One search call; returns the full response with a list under 'data'."""
        response = await self._call(
            ProviderStage.SEARCH,
            self.client.search_offers(criteria.to_provider_params()),
        )
        if not isinstance(response["data"], list):
            raise ProviderError(ProviderStage.SEARCH, MALFORMED_RESPONSE)
        return response

    async def search_offers(self, criteria: SearchCriteria) -> List[Dict[str, Any]]:
        """Search offers. An empty list means the provider found nothing."""
        response = await self._search(criteria)
        offers = response["data"]
        logger.info("Found %s offers for %s->%s", len(offers), criteria.origin, criteria.destination)
        return offers

    async def _select_primary_offer(self, criteria: SearchCriteria) -> Dict[str, Any]:
        """Search and take the first offer in provider order; no re-ranking."""
        offers = await self.search_offers(criteria)
        if not offers:
            raise NoOffersFoundError(
                f"No flight offers found for {criteria.origin}->{criteria.destination} "
                f"on {criteria.departure_date.isoformat()}"
            )
        return offers[0]

    # ---------------------------
    # Multi-step workflows
    # ---------------------------
    async def price_confirmed_offer(self, criteria: SearchCriteria) -> Any:
        offer = await self._select_primary_offer(criteria)
        body = {"data": {"type": "flight-offers-pricing", "flightOffers": [offer]}}
        response = await self._call(ProviderStage.PRICE, self.client.price_offers(body))
        return response["data"]

    async def get_seat_map_for_criteria(self, criteria: SearchCriteria) -> Any:
        offer = await self._select_primary_offer(criteria)
        response = await self._call(ProviderStage.SEATMAP, self.client.get_seat_maps({"data": [offer]}))
        return response["data"]

    async def predict_offers(self, criteria: SearchCriteria) -> Any:
        """Rank across every candidate: the whole search response is forwarded."""
        search_response = await self._search(criteria)
        response = await self._call(ProviderStage.PREDICTION, self.client.predict_offers(search_response))
        return response["data"]

    # ---------------------------
    # Single-call operations
    # ---------------------------
    async def upsell_offers(self, payload: Dict[str, Any]) -> Any:
        response = await self._call(ProviderStage.UPSELL, self.client.upsell_offers(payload))
        return response["data"]

    async def get_seat_map_for_order(self, order_id: str) -> Any:
        response = await self._call(ProviderStage.SEATMAP, self.client.get_order_seat_maps(order_id))
        return response["data"]

    async def create_order(self, payload: Dict[str, Any]) -> Any:
        response = await self._call(ProviderStage.ORDER, self.client.create_order(payload))
        return response["data"]

    async def get_order(self, order_id: str) -> Any:
        response = await self._call(ProviderStage.ORDER, self.client.get_order(order_id))
        return response["data"]

    async def cancel_order(self, order_id: str) -> None:
        await self._call(ProviderStage.ORDER, self.client.cancel_order(order_id), expect_data=False)

    # ---------------------------
    # Raw pass-throughs
    # ---------------------------
    async def search_offers_raw(self, body: Dict[str, Any]) -> Any:
        response = await self._call(ProviderStage.SEARCH, self.client.search_offers_post(body))
        return response["data"]

    async def price_offers_raw(self, body: Dict[str, Any], include_bags: bool = False) -> Any:
        response = await self._call(
            ProviderStage.PRICE,
            self.client.price_offers(body, include="bags" if include_bags else None),
        )
        return response["data"]

    async def search_availabilities(self, body: Dict[str, Any]) -> Any:
        response = await self._call(ProviderStage.AVAILABILITY, self.client.search_availabilities(body))
        return response["data"]

    async def search_destinations(
        self,
        origin: str,
        departure_date: Optional[str] = None,
        one_way: Optional[bool] = None,
        max_price: Optional[int] = None,
    ) -> Any:
        params: Dict[str, Any] = {"origin": self._code(origin, "origin")}
        if departure_date:
            params["departureDate"] = departure_date
        if one_way is not None:
            params["oneWay"] = "true" if one_way else "false"
        if max_price is not None:
            params["maxPrice"] = max_price
        response = await self._call(ProviderStage.DESTINATIONS, self.client.search_destinations(params))
        return response["data"]

    async def search_dates(self, origin: str, destination: str, one_way: Optional[bool] = None) -> Any:
        params: Dict[str, Any] = {
            "origin": self._code(origin, "origin"),
            "destination": self._code(destination, "destination"),
        }
        if one_way is not None:
            params["oneWay"] = "true" if one_way else "false"
        response = await self._call(ProviderStage.DATES, self.client.search_offer_dates(params))
        return response["data"]

    async def lookup_locations(self, keyword: str, sub_type: str = "AIRPORT,CITY") -> Any:
        keyword = (keyword or "").strip()
        if not keyword:
            raise BadRequestError("keyword is required")
        params = {"keyword": keyword.upper(), "subType": sub_type.upper()}
        response = await self._call(ProviderStage.LOCATIONS, self.client.lookup_locations(params))
        return response["data"]

    async def lookup_checkin_links(self, airline_code: str) -> Any:
        code = (airline_code or "").strip().upper()
        if not code:
            raise BadRequestError("airlineCode is required")
        response = await self._call(
            ProviderStage.REFERENCE, self.client.lookup_checkin_links({"airlineCode": code})
        )
        return response["data"]

    async def get_flight_status(self, carrier_code: str, flight_number: str, scheduled_departure_date: str) -> Any:
        params = {
            "carrierCode": carrier_code.strip().upper(),
            "flightNumber": flight_number.strip(),
            "scheduledDepartureDate": scheduled_departure_date,
        }
        response = await self._call(ProviderStage.STATUS, self.client.get_flight_status(params))
        return response["data"]

    @staticmethod
    def _code(value: str, field_name: str) -> str:
        try:
            return normalize_iata_code(value, field_name)
        except ValueError as e:
            raise BadRequestError(str(e)) from e
