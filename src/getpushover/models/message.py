"""
Message and credential models.

Wire format: GET /messages.json returns
{"status": 1, "messages": [{"id": 5, "message": "...", "date": 1700000000, ...}]}
"""

from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Message(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # `id_str` is read when the relay sends the id only in string form
    id: Union[int, str] = Field(validation_alias=AliasChoices("id", "id_str"))
    title: Optional[str] = None
    body: str = Field(alias="message")
    received_at: int = Field(alias="date")
    app: Optional[str] = None
    priority: int = 0
    url: Optional[str] = None

    @property
    def dedup_key(self) -> tuple[str, int]:
        return (self.body, self.received_at)

    @property
    def display_title(self) -> str:
        label = self.title or self.app
        return f"Pushover: {label}" if label else "Pushover Notification"


class MessageBatch(BaseModel):
    status: int = 1
    messages: list[Message] = []


class Credentials(BaseModel):
    email: Optional[str] = None
    secret: Optional[str] = None
    device_id: Optional[str] = None
    device_name: Optional[str] = None

    @property
    def complete(self) -> bool:
        return bool(self.secret and self.device_id)


def id_order(message_id: Union[int, str]) -> tuple[int, Union[int, str]]:
    """Sort key for relay message ids: numeric ids compare as numbers and rank above opaque ones."""
    try:
        return (1, int(message_id))
    except (TypeError, ValueError):
        return (0, str(message_id))


def highest_id(messages: list[Message]) -> Optional[Union[int, str]]:
    if not messages:
        return None
    return max((m.id for m in messages), key=id_order)
