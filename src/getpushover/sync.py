"""
Sync pipeline: run on every "new data" signal.

fetch → filter against the ledger → persist → notify → acknowledge.
Overlapping runs are allowed; the ledger catches duplicates.
"""

import asyncio
import logging
import sqlite3
from typing import Optional, Union

import httpx
from pydantic import BaseModel, Field

from getpushover.client import RelayClient
from getpushover.errors import PushoverError
from getpushover.models.message import Message, highest_id
from getpushover.notify import Notifier
from getpushover.store import CredentialStore, DedupLedger

logger = logging.getLogger(__name__)


class SyncResult(BaseModel):
    """Outcome of one pipeline run: ids delivered, ids already seen, and the acknowledgment sent."""

    fetched: int = 0
    delivered: list[Union[int, str]] = Field(default_factory=list)
    skipped: list[Union[int, str]] = Field(default_factory=list)
    acknowledged: Optional[Union[int, str]] = None
    acknowledge_ok: bool = False


class SyncPipeline:
    def __init__(
        self,
        relay: RelayClient,
        credentials: CredentialStore,
        ledger: DedupLedger,
        notifier: Notifier,
    ):
        self._relay = relay
        self._credentials = credentials
        self._ledger = ledger
        self._notifier = notifier

    async def run(self) -> SyncResult:
        result = SyncResult()
        creds = self._credentials.credentials()
        if not creds.complete:
            logger.error("Cannot sync: no device registered. Run `getpushover login`.")
            return result

        try:
            batch = await self._relay.fetch_messages(creds.secret, creds.device_id)  # type: ignore[arg-type]
        except (PushoverError, httpx.HTTPError) as e:
            logger.error(f"Fetching messages failed: {e}")
            return result

        result.fetched = len(batch)
        if not batch:
            logger.debug("No pending messages")
            return result

        for message in batch:
            if self._record(message):
                await self._notify(message)
                result.delivered.append(message.id)
            else:
                result.skipped.append(message.id)

        result.acknowledged = highest_id(batch)
        result.acknowledge_ok = await self._relay.acknowledge(
            creds.secret, creds.device_id, result.acknowledged,  # type: ignore[arg-type]
        )
        logger.info(
            f"Synced {result.fetched} message(s): {len(result.delivered)} new, "
            f"{len(result.skipped)} already seen, acknowledged up to {result.acknowledged}"
        )
        return result

    def _record(self, message: Message) -> bool:
        """Check and insert with no await in between. Returns False for a message already seen."""
        try:
            if self._ledger.exists(message.body, message.received_at):
                logger.debug(f"Message {message.id} already delivered")
                return False
            return self._ledger.insert(message)
        except sqlite3.Error as e:
            logger.error(f"Could not record message {message.id} in ledger: {e}")
            return True

    async def _notify(self, message: Message) -> None:
        try:
            await asyncio.to_thread(self._notifier.notify, message.display_title, message.body)
        except Exception as e:
            logger.warning(f"Notification for message {message.id} failed: {e}")
