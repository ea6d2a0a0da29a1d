"""
Storefront backend API client.

All backend responses are wrapped as {"success": bool, "data": ...};
`get`/`post` return the unwrapped `data`, `get_paginated` returns the whole body.
"""
from typing import Any, Dict, Optional
import logging
import httpx
from storefront.config import settings
from storefront.core.exceptions import ApiError

logger = logging.getLogger(__name__)


class BackendClient:
    """Async HTTP client for the storefront backend"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.BACKEND_API_URL
        self.timeout = timeout if timeout is not None else settings.BACKEND_API_TIMEOUT
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.info("Backend API client closed")

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[API] Network error: no response from server ({method} {url}): {e}")
            raise ApiError(f"Network error calling {method} {url}") from e

        if response.is_error:
            self._log_error_status(response)
            detail = self._safe_json(response)
            raise ApiError(
                f"Backend responded {response.status_code} for {method} {url}",
                status_code=response.status_code,
                detail=detail,
            )

        body = self._safe_json(response)
        if isinstance(body, dict) and body.get("success") is False:
            logger.error(f"[API] Backend reported failure for {method} {url}: {body.get('error')}")
            raise ApiError(
                f"Backend reported failure for {method} {url}",
                status_code=response.status_code,
                detail=body.get("error"),
            )
        return body

    @staticmethod
    def _safe_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _log_error_status(response: httpx.Response):
        status = response.status_code
        if status == 401:
            logger.warning("[API] Unauthorized")
        elif status == 403:
            logger.error(f"[API] Access forbidden: {response.text}")
        elif status == 404:
            logger.error(f"[API] Resource not found: {response.request.url}")
        elif status == 429:
            logger.error("[API] Rate limit exceeded. Please try again later.")
        elif status >= 500:
            logger.error(f"[API] Server error: {response.text}")
        else:
            logger.error(f"[API] API error {status}: {response.text}")

    @staticmethod
    def _unwrap(body: Any) -> Any:
        if isinstance(body, dict):
            return body.get("data")
        return None

    async def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._unwrap(await self._request("GET", url, params=params))

    async def post(self, url: str, data: Any = None) -> Any:
        return self._unwrap(await self._request("POST", url, json=data))

    async def get_paginated(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        body = await self._request("GET", url, params=params)
        if not isinstance(body, dict):
            raise ApiError(f"Unexpected paginated response for GET {url}")
        return body


# Singleton instance
backend_client = BackendClient()


async def close_backend_client():
    """Close HTTP connections on shutdown"""
    await backend_client.close()
