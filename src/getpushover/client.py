"""
RelayClient: stateless REST client for the Pushover relay.
"""

from typing import Optional, Union

import httpx

from getpushover.auth import Auth
from getpushover.messages import MessagesAPI
from getpushover.models.message import Message
from getpushover.transport.http import DEFAULT_API_URL, HttpClient


class RelayClient:
    """Login, device registration, message download and acknowledgment.

    Holds no session state: every call takes the secret and device id it
    needs, so callers always act on the current credentials.
    """

    def __init__(self, api_url: str = DEFAULT_API_URL, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.http = HttpClient(base_url=api_url, transport=transport)
        self.auth = Auth(self.http)
        self.messages = MessagesAPI(self.http)

    async def login(self, email: str, password: str, twofa: Optional[str] = None) -> str:
        return await self.auth.login(email, password, twofa=twofa)

    async def register_device(
        self, secret: str, name: str, current_device_id: Optional[str] = None,
    ) -> Optional[str]:
        return await self.auth.register_device(secret, name, current_device_id=current_device_id)

    async def fetch_messages(self, secret: str, device_id: str) -> list[Message]:
        return await self.messages.fetch(secret, device_id)

    async def acknowledge(self, secret: str, device_id: str, highest_id: Union[int, str]) -> bool:
        return await self.messages.acknowledge(secret, device_id, highest_id)

    async def close(self) -> None:
        await self.http.close()

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
