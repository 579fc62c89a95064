"""Shared fixtures and fakes for getpushover tests."""

import asyncio
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from websockets.exceptions import ConnectionClosedOK

from getpushover.models.message import Message
from getpushover.store import CredentialStore, DedupLedger
from getpushover.sync import SyncResult


def make_message(id: Any, body: Optional[str] = None, date: Optional[int] = None, **kwargs: Any) -> Message:
    return Message(
        id=id,
        body=body if body is not None else f"message {id}",
        received_at=date if date is not None else 1_700_000_000 + int(id),
        **kwargs,
    )


class FakeWebSocket:
    """Replays frames, then reports a closed connection (or blocks until closed)."""

    def __init__(self, frames=(), hang: bool = False):
        self.frames = list(frames)
        self.hang = hang
        self.sent: list[str] = []
        self.closed = False
        self._closed_event = asyncio.Event()

    async def send(self, data: str) -> None:
        self.sent.append(data)

    async def recv(self) -> Any:
        if self.frames:
            return self.frames.pop(0)
        if self.hang and not self.closed:
            await self._closed_event.wait()
        raise ConnectionClosedOK(None, None)

    async def close(self) -> None:
        self.closed = True
        self._closed_event.set()


class FakeConnector:
    """Stands in for websockets.connect; hands out sockets in order."""

    def __init__(self, *sockets: Any):
        self._pending = list(sockets)
        self.opened: list[Any] = []
        self.calls: list[str] = []
        self.open_at_connect: list[list[Any]] = []

    async def __call__(self, url: str, **kwargs: Any) -> Any:
        self.calls.append(url)
        self.open_at_connect.append([ws for ws in self.opened if not ws.closed])
        nxt = self._pending.pop(0)
        if isinstance(nxt, BaseException):
            raise nxt
        self.opened.append(nxt)
        return nxt


@pytest.fixture
def store(tmp_path) -> CredentialStore:
    s = CredentialStore(tmp_path / "config.json")
    s.set("email", "me@example.com")
    s.set("device_name", "laptop")
    s.set("secret", "sec-1")
    s.set("device_id", "dev-1")
    return s


@pytest.fixture
def ledger():
    lg = DedupLedger(":memory:")
    yield lg
    lg.close()


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock()


@pytest.fixture
def relay() -> MagicMock:
    r = MagicMock()
    r.fetch_messages = AsyncMock(return_value=[])
    r.acknowledge = AsyncMock(return_value=True)
    r.register_device = AsyncMock(return_value="dev-1")
    return r


@pytest.fixture
def pipeline() -> MagicMock:
    p = MagicMock()
    p.run = AsyncMock(return_value=SyncResult())
    return p
