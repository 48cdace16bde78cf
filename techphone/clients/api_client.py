import logging
from typing import Any, Dict, Optional

import httpx

from techphone.core.config import API_BASE_URL, API_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class ApiClient:
    """Thin async wrapper over the storefront REST API."""

    def __init__(self, base_url: str = API_BASE_URL, timeout: float = API_TIMEOUT_SECONDS,
                 token: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token = token
        self._transport = transport

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                      json: Any = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug(f"[API] {method} {url} params={params}")
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                resp = await client.request(method, url, params=params, json=json, headers=self.headers())
            except httpx.TimeoutException:
                logger.error(f"[API] {method} {url} timed out")
                raise ApiError(408, "Request timeout")
            except httpx.HTTPError as e:
                logger.error(f"[API] {method} {url} failed: {e}")
                raise ApiError(0, f"Network error: {e}")

        if resp.is_error:
            try:
                message = resp.json().get("error") or resp.reason_phrase
            except ValueError:
                message = resp.text or resp.reason_phrase
            logger.error(f"[API] {method} {url} -> {resp.status_code}: {message}")
            raise ApiError(resp.status_code, message)

        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
