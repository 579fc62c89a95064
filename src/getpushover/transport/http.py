"""
REST HTTP client for the Pushover Open Client API.

Requests are form-encoded; responses carry `status: 1` on success.
"""

from typing import Any, Optional

import httpx

from getpushover.errors import HTTP_ERROR, PushoverError

DEFAULT_API_URL = "https://api.pushover.net/1"


class HttpClient:
    def __init__(self, base_url: str = DEFAULT_API_URL, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"User-Agent": "getpushover/0.1.0", "Accept": "application/json"},
            timeout=30.0,
            transport=transport,
        )

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return None

    def _check(self, resp: httpx.Response) -> Any:
        data = self._decode(resp)
        if resp.status_code >= 400:
            raise PushoverError(
                HTTP_ERROR,
                f"HTTP {resp.status_code}: {resp.text[:200]}",
                details={"status_code": resp.status_code, "body": data},
            )
        return data

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        resp = await self._client.get(path, params=params)
        return self._check(resp)

    async def post(self, path: str, form: Optional[dict[str, Any]] = None) -> Any:
        resp = await self._client.post(path, data=form)
        return self._check(resp)

    async def close(self) -> None:
        await self._client.aclose()
