"""
getpushover — Pushover Open Client for the desktop.

Keeps a push stream to the Pushover relay open, downloads new messages,
shows them as desktop notifications and acknowledges them.
"""

from getpushover.client import RelayClient
from getpushover.session import SessionManager, ConnectionState
from getpushover.sync import SyncPipeline, SyncResult
from getpushover.store import CredentialStore, DedupLedger
from getpushover.notify import Notifier, DesktopNotifier, ConsoleNotifier
from getpushover.errors import PushoverError, AuthError, RegistrationError, ConnectionError
from getpushover.models.message import Message, Credentials
from getpushover.models.signals import ControlSignal

__version__ = "0.1.0"
__all__ = [
    "RelayClient",
    "SessionManager",
    "ConnectionState",
    "SyncPipeline",
    "SyncResult",
    "CredentialStore",
    "DedupLedger",
    "Notifier",
    "DesktopNotifier",
    "ConsoleNotifier",
    "PushoverError",
    "AuthError",
    "RegistrationError",
    "ConnectionError",
    "Message",
    "Credentials",
    "ControlSignal",
]
