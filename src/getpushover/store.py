"""
Local state: the credential store and the dedup ledger.

Both default to ~/.config/getpushover/.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from pathlib import Path
from typing import Any, Union

from getpushover.models.message import Credentials, Message

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "getpushover"
CONFIG_FILE = CONFIG_DIR / "config.json"
LEDGER_FILE = CONFIG_DIR / "pushover.db"


class CredentialStore:
    """JSON key/value file holding email, secret, device id and device name."""

    def __init__(self, path: Union[str, Path] = CONFIG_FILE):
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        try:
            return json.loads(self.path.read_text())
        except (FileNotFoundError, json.JSONDecodeError):
            return {}

    def _save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # new files are created owner-only; chmod covers a file that already existed
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            json.dump(data, f, indent=2)
        try:
            self.path.chmod(0o600)
        except OSError:
            logger.debug(f"Could not restrict permissions on {self.path}")

    def has(self, key: str) -> bool:
        return key in self._load()

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def clear(self) -> None:
        self._save({})

    def credentials(self) -> Credentials:
        return Credentials.model_validate(self._load())


class DedupLedger:
    """Messages already delivered, keyed by (body, received_at).

    The relay's message id is deliberately not the key. Two distinct messages
    with the same body and timestamp collapse into one, and a relay that
    rewrote timestamps would cause redelivery.
    """

    def __init__(self, path: Union[str, Path] = LEDGER_FILE):
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS messages (
                body TEXT NOT NULL,
                received_at INTEGER NOT NULL,
                message_id TEXT NOT NULL,
                title TEXT,
                app TEXT,
                UNIQUE (body, received_at)
            )
            """
        )
        self._conn.commit()

    def exists(self, body: str, received_at: int) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM messages WHERE body=? AND received_at=?", (body, received_at),
        ).fetchone()
        return row is not None

    def insert(self, message: Message) -> bool:
        """Record a delivered message. Returns False if it was already recorded.

        Storage failures raise sqlite3.Error.
        """
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT INTO messages (body, received_at, message_id, title, app) VALUES (?, ?, ?, ?, ?)",
                    (message.body, message.received_at, str(message.id), message.title, message.app),
                )
        except sqlite3.IntegrityError:
            return False
        return True

    def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM messages").fetchone()[0]

    def close(self) -> None:
        self._conn.close()
