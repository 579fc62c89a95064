"""
Messages REST API: download pending messages, acknowledge the highest one.
"""

from __future__ import annotations

import logging
from typing import Union

import httpx

from getpushover.errors import PushoverError
from getpushover.models.message import Message, MessageBatch
from getpushover.transport.http import HttpClient

logger = logging.getLogger(__name__)


class MessagesAPI:
    def __init__(self, http: HttpClient):
        self._http = http

    async def fetch(self, secret: str, device_id: str) -> list[Message]:
        """Download all messages waiting for this device, in relay order."""
        result = await self._http.get("/messages.json", {"secret": secret, "device_id": device_id})
        return MessageBatch.model_validate(result or {}).messages

    async def acknowledge(self, secret: str, device_id: str, highest_id: Union[int, str]) -> bool:
        """Tell the relay every message up to `highest_id` was received.

        Failures are logged and reported as False; the next fetch will
        acknowledge again.
        """
        try:
            result = await self._http.post(
                f"/devices/{device_id}/update_highest_message.json",
                {"secret": secret, "message": str(highest_id)},
            )
        except (PushoverError, httpx.HTTPError) as e:
            logger.warning(f"Acknowledge of message {highest_id} failed: {e}")
            return False
        if isinstance(result, dict) and result.get("status") == 1:
            return True
        logger.warning(f"Acknowledge of message {highest_id} not accepted: {result}")
        return False
