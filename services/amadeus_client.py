# services/amadeus_client.py
"""
Amadeus Self-Service API client.

One coroutine per provider capability. Every method returns the decoded JSON
document untouched (``{"data": ..., "dictionaries": ..., "meta": ...}``) and
lets httpx errors propagate; turning them into domain errors is the
orchestrator's job.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from app.core.config import settings
from services.base_api_service import BaseAPIService

logger = logging.getLogger(__name__)

# refresh the OAuth token this long before the provider says it expires
TOKEN_EXPIRY_PAD_S = 300


class AmadeusClient(BaseAPIService):
    """Async client for the flight search, pricing, booking and reference APIs."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(
            base_url or settings.AMADEUS_BASE_URL,
            timeout_s=timeout_s or settings.PROVIDER_TIMEOUT_S,
            transport=transport,
        )
        self.api_key = api_key if api_key is not None else settings.AMADEUS_API_KEY
        self.api_secret = api_secret if api_secret is not None else settings.AMADEUS_API_SECRET
        self._token: Optional[str] = None
        self._token_expires_at = datetime.min.replace(tzinfo=timezone.utc)
        self._token_lock = asyncio.Lock()

    # ---------------------------
    # OAuth token management
    # ---------------------------
    async def get_token(self) -> str:
        async with self._token_lock:
            now = datetime.now(timezone.utc)
            if self._token and self._token_expires_at > now:
                return self._token

            logger.info("Amadeus token missing/expired. Fetching new one...")
            client = await self._get_client()
            resp = await client.post(
                f"{self.base_url}{settings.AMADEUS_TOKEN_PATH}",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.api_key,
                    "client_secret": self.api_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            resp.raise_for_status()
            token_data = resp.json()
            self._token = token_data["access_token"]
            expires_in = int(token_data.get("expires_in", 0))
            self._token_expires_at = now + timedelta(seconds=max(expires_in - TOKEN_EXPIRY_PAD_S, 60))
            logger.info("Amadeus token retrieved.")
            return self._token

    async def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {await self.get_token()}"}

    async def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        try:
            return await super()._request(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            if e.response.status_code != 401:
                raise
            # Token revoked before its advertised expiry: refresh once. The call
            # was rejected before the provider acted on it.
            self._token = None
            return await super()._request(method, endpoint, **kwargs)

    # ---------------------------
    # Shopping
    # ---------------------------
    async def search_offers(self, params: Dict[str, Any]) -> Any:
        return await self._get("/v2/shopping/flight-offers", params=params)

    async def search_offers_post(self, body: Dict[str, Any]) -> Any:
        return await self._post("/v2/shopping/flight-offers", json=body)

    async def search_offer_dates(self, params: Dict[str, Any]) -> Any:
        return await self._get("/v1/shopping/flight-dates", params=params)

    async def search_destinations(self, params: Dict[str, Any]) -> Any:
        return await self._get("/v1/shopping/flight-destinations", params=params)

    async def price_offers(self, body: Dict[str, Any], include: Optional[str] = None) -> Any:
        params = {"include": include} if include else None
        return await self._post("/v1/shopping/flight-offers/pricing", json=body, params=params)

    async def get_seat_maps(self, body: Dict[str, Any]) -> Any:
        return await self._post("/v1/shopping/seatmaps", json=body)

    async def get_order_seat_maps(self, order_id: str) -> Any:
        return await self._get("/v1/shopping/seatmaps", params={"flight-orderId": order_id})

    async def predict_offers(self, body: Dict[str, Any]) -> Any:
        return await self._post("/v2/shopping/flight-offers/prediction", json=body)

    async def upsell_offers(self, body: Dict[str, Any]) -> Any:
        return await self._post("/v1/shopping/flight-offers/upselling", json=body)

    async def search_availabilities(self, body: Dict[str, Any]) -> Any:
        return await self._post("/v1/shopping/availability/flight-availabilities", json=body)

    # ---------------------------
    # Booking
    # ---------------------------
    async def create_order(self, body: Dict[str, Any]) -> Any:
        return await self._post("/v1/booking/flight-orders", json=body)

    async def get_order(self, order_id: str) -> Any:
        return await self._get(f"/v1/booking/flight-orders/{quote(order_id, safe='')}")

    async def cancel_order(self, order_id: str) -> Any:
        return await self._delete(f"/v1/booking/flight-orders/{quote(order_id, safe='')}")

    # ---------------------------
    # Reference data / schedule
    # ---------------------------
    async def lookup_locations(self, params: Dict[str, Any]) -> Any:
        return await self._get("/v1/reference-data/locations", params=params)

    async def lookup_checkin_links(self, params: Dict[str, Any]) -> Any:
        return await self._get("/v2/reference-data/urls/checkin-links", params=params)

    async def get_flight_status(self, params: Dict[str, Any]) -> Any:
        return await self._get("/v2/schedule/flights", params=params)
