#services/base_api_service.py



from __future__ import annotations
import logging
from typing import Any, Dict, Optional


import httpx




class BaseAPIService:
    """Shared async HTTP plumbing for provider clients.

    Requests are issued exactly once: provider fares and availability are
    time-sensitive, so a failed call is reported rather than replayed.
    """
    DEFAULT_TIMEOUT_S = 15.0


    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout_s: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout_s = timeout_s or self.DEFAULT_TIMEOUT_S
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.logger = logging.getLogger(self.__class__.__name__)


    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout_s,
                headers=self.headers,
                transport=self._transport,
            )
        return self._client


    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None


    async def _auth_headers(self) -> Dict[str, str]:
        return {}


    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        ) -> Any:
        url = f"{self.base_url}{endpoint}"
        headers = await self._auth_headers()

        client = await self._get_client()
        try:
            resp = await client.request(method, url, params=params, json=json, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            self.logger.error("HTTP error %s on %s %s: %s", e.response.status_code, method, url, e.response.text[:500])
            raise
        except (httpx.TimeoutException, httpx.TransportError) as e:
            self.logger.error("Transport error on %s %s: %s", method, url, e)
            raise

        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()


    async def _get(self, endpoint: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("GET", endpoint, params=params)


    async def _post(self, endpoint: str, *, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("POST", endpoint, json=json, params=params)


    async def _delete(self, endpoint: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("DELETE", endpoint, params=params)
