"""
Session manager: owns the push stream and keeps it alive.

States: disconnected → connecting → authenticating → live → reconnecting → disconnected.
`closed` is entered only through stop().

Exactly one stream is open at a time: connect() always closes the previous
stream before opening the next one.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Optional

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, wait_exponential
from websockets.exceptions import ConnectionClosed, WebSocketException

from getpushover.client import RelayClient
from getpushover.errors import AuthError, ConnectionError, PushoverError
from getpushover.models.signals import ControlSignal
from getpushover.store import CredentialStore
from getpushover.sync import SyncPipeline
from getpushover.transport.stream import DEFAULT_PUSH_URL, Connector, StreamConnection

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (OSError, asyncio.TimeoutError, WebSocketException)
DEFAULT_IDLE_TIMEOUT_S = 90.0
# a stream that stayed live this long reconnects at once, with a fresh backoff
STABLE_AFTER_S = 60.0


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    LIVE = "live"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


class SessionManager:
    def __init__(
        self,
        relay: RelayClient,
        credentials: CredentialStore,
        pipeline: SyncPipeline,
        push_url: str = DEFAULT_PUSH_URL,
        connector: Optional[Connector] = None,
        idle_timeout: Optional[float] = DEFAULT_IDLE_TIMEOUT_S,
        backoff_initial: float = 1.0,
        backoff_max: float = 60.0,
    ):
        self._relay = relay
        self._credentials = credentials
        self._pipeline = pipeline
        self._push_url = push_url
        self._connector = connector
        self._idle_timeout = idle_timeout
        self._backoff_initial = backoff_initial
        self._backoff_max = backoff_max

        self._state = ConnectionState.DISCONNECTED
        self._stream: Optional[StreamConnection] = None
        self._sync_tasks: set[asyncio.Task] = set()
        self._stopping = False
        self._stop_event: Optional[asyncio.Event] = None
        self._live_since: Optional[float] = None
        self.connections_opened = 0
        self.last_keepalive: Optional[float] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def live(self) -> bool:
        return self._state == ConnectionState.LIVE and self._stream is not None

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open a fresh stream and log in. Raises ConnectionError on transport failure."""
        await self.terminate()
        creds = self._credentials.credentials()
        self._live_since = None
        if not creds.complete:
            raise AuthError("No device registered. Run `getpushover login` first.")

        self._state = ConnectionState.CONNECTING
        logger.info(f"Connecting to {self._push_url}")
        stream = StreamConnection(self._push_url, self._connector)
        try:
            await stream.open()
        except TRANSPORT_ERRORS as e:
            self._state = ConnectionState.DISCONNECTED
            raise ConnectionError(f"Could not connect to {self._push_url}: {e}") from e
        self._stream = stream
        self.connections_opened += 1

        self._state = ConnectionState.AUTHENTICATING
        try:
            await stream.login(creds.device_id, creds.secret)  # type: ignore[arg-type]
        except TRANSPORT_ERRORS as e:
            logger.error(f"Login frame rejected by relay: {e}")
        else:
            logger.info("Connected to Pushover, login sent")
        self._state = ConnectionState.LIVE
        self.last_keepalive = time.monotonic()
        self._live_since = self.last_keepalive

    async def terminate(self) -> None:
        """Close the active stream, if any."""
        stream, self._stream = self._stream, None
        if stream is not None:
            await stream.close()
        if self._state != ConnectionState.CLOSED:
            self._state = ConnectionState.DISCONNECTED

    async def serve_once(self) -> bool:
        """Connect and read control signals until the stream ends.

        Returns True if a reset was requested and False once stop() was called.
        Raises ConnectionError when the stream drops or goes idle.
        """
        await self.connect()
        stream = self._stream
        reason = "stream ended"
        try:
            while not self._stopping and stream is self._stream:
                signal, payload = await stream.receive(timeout=self._idle_timeout)  # type: ignore[union-attr]
                if await self.handle_signal(signal, payload):
                    self._state = ConnectionState.RECONNECTING
                    await self.terminate()
                    return True
        except ConnectionClosed as e:
            reason = f"closed by relay: {e}"
        except asyncio.TimeoutError:
            reason = f"no frame from relay for {self._idle_timeout:.0f}s"
        except TRANSPORT_ERRORS as e:
            reason = f"transport failure: {e}"
        if stream is self._stream:
            await self.terminate()
        if self._stopping:
            return False
        raise ConnectionError(f"Push stream dropped ({reason})")

    async def run(self) -> None:
        """Keep a live stream until stop() is called. Never raises on connection trouble."""
        self._stopping = False
        self._stop_event = asyncio.Event()
        while not self._stopping:
            try:
                async for attempt in AsyncRetrying(
                    retry=retry_if_exception_type(Exception),
                    wait=wait_exponential(multiplier=self._backoff_initial, max=self._backoff_max),
                    stop=self._stop_requested,
                    sleep=self._sleep,
                    before_sleep=self._log_retry,
                    reraise=True,
                ):
                    with attempt:
                        await self._serve_attempt()
            except Exception as e:
                # retrying only gives up once stop() was requested
                logger.debug(f"Push session stopped during retry: {e}")
        self._state = ConnectionState.CLOSED

    async def _serve_attempt(self) -> None:
        if self._stopping:
            return
        try:
            await self.serve_once()
        except ConnectionError:
            if self._uptime() < STABLE_AFTER_S:
                raise
            logger.warning("Push stream dropped after a stable connection, reconnecting now")

    def _uptime(self) -> float:
        if self._live_since is None:
            return 0.0
        return time.monotonic() - self._live_since

    def _stop_requested(self, retry_state: RetryCallState) -> bool:
        return self._stopping

    async def _sleep(self, seconds: float) -> None:
        """Backoff wait that stop() cuts short."""
        if self._stop_event is None:
            await asyncio.sleep(seconds)
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        if isinstance(exc, PushoverError):
            logger.warning(f"{exc}. Reconnecting in {delay:.0f}s (attempt {retry_state.attempt_number})")
        else:
            logger.error(f"Unexpected error in push session. Reconnecting in {delay:.0f}s", exc_info=exc)

    async def stop(self) -> None:
        self._stopping = True
        if self._stop_event is not None:
            self._stop_event.set()
        await self.terminate()
        self._state = ConnectionState.CLOSED

    # ------------------------------------------------------------------
    # Control signals
    # ------------------------------------------------------------------

    async def handle_signal(self, signal: ControlSignal, payload: str = "") -> bool:
        """Act on one control signal. Returns True if the stream must be reset."""
        if signal is ControlSignal.KEEPALIVE:
            self.last_keepalive = time.monotonic()
            logger.debug("Keepalive")
        elif signal is ControlSignal.NEW_DATA:
            logger.info("New messages waiting")
            self._spawn_sync()
        elif signal is ControlSignal.RESET:
            logger.info("Relay requested a reconnect")
            return True
        elif signal is ControlSignal.REAUTHENTICATE:
            return await self._reauthenticate()
        else:
            logger.info(f"Message from relay: {payload!r}")
        return False

    async def _reauthenticate(self) -> bool:
        logger.info("Relay requested re-authentication, registering device again")
        creds = self._credentials.credentials()
        if not creds.secret or not creds.device_name:
            logger.error("Cannot re-register: secret or device name missing. Run `getpushover login`.")
            return False
        try:
            device_id = await self._relay.register_device(
                creds.secret, creds.device_name, current_device_id=creds.device_id,
            )
        except PushoverError as e:
            logger.error(f"Device re-registration failed: {e}")
            return False
        if not device_id or device_id == creds.device_id:
            logger.info("Device already registered, keeping current device id")
            return False
        self._credentials.set("device_id", device_id)
        logger.info(f"Relay issued new device id {device_id}, reconnecting")
        return True

    # ------------------------------------------------------------------
    # Background sync runs
    # ------------------------------------------------------------------

    def _spawn_sync(self) -> asyncio.Task:
        task = asyncio.create_task(self._pipeline.run())
        self._sync_tasks.add(task)
        task.add_done_callback(self._sync_done)
        return task

    def _sync_done(self, task: asyncio.Task) -> None:
        self._sync_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Sync run failed: {exc}", exc_info=exc)

    async def drain(self) -> None:
        """Wait for sync runs still in flight."""
        if self._sync_tasks:
            await asyncio.gather(*list(self._sync_tasks), return_exceptions=True)
