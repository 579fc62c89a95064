"""
Push stream connection: wss://client.pushover.net/push.

After the socket opens the client sends `login:<device_id>:<secret>\\n`;
from then on the relay only sends single-character control frames.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import websockets

from getpushover.models.signals import ControlSignal

DEFAULT_PUSH_URL = "wss://client.pushover.net/push"

Connector = Callable[..., Awaitable[Any]]

logger = logging.getLogger(__name__)


class StreamConnection:
    def __init__(self, url: str = DEFAULT_PUSH_URL, connector: Optional[Connector] = None):
        self._url = url
        self._connector = connector or websockets.connect
        self._ws: Optional[Any] = None

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_open(self) -> bool:
        return self._ws is not None

    async def open(self, timeout: float = 15.0) -> None:
        self._ws = await asyncio.wait_for(self._connector(self._url, compression=None), timeout=timeout)

    async def login(self, device_id: str, secret: str) -> None:
        if self._ws is None:
            raise RuntimeError("Push stream not open")
        await self._ws.send(f"login:{device_id}:{secret}\n")

    async def receive(self, timeout: Optional[float] = None) -> tuple[ControlSignal, str]:
        """Wait for the next frame. Raises ConnectionClosed when the relay hangs up."""
        if self._ws is None:
            raise RuntimeError("Push stream not open")
        frame = await asyncio.wait_for(self._ws.recv(), timeout=timeout)
        return ControlSignal.decode(frame)

    async def close(self) -> None:
        ws, self._ws = self._ws, None
        if ws is None:
            return
        try:
            await ws.close()
        except Exception as e:
            logger.debug(f"Error while closing push stream: {e}")
