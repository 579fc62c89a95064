"""
Errors raised by the relay client and the push session.

Every error carries a short machine-readable `code`:

  http_error          relay answered with HTTP >= 400 (`details` holds status and body)
  auth_error          login or secret rejected
  twofa_required      login needs a two-factor code (relay answers 412)
  registration_error  device registration refused for a reason other than a taken name
  connection_error    push stream could not be opened or dropped
"""

from typing import Any, Optional

HTTP_ERROR = "http_error"
AUTH_ERROR = "auth_error"
TWOFA_REQUIRED = "twofa_required"
REGISTRATION_ERROR = "registration_error"
CONNECTION_ERROR = "connection_error"


class PushoverError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details

    @property
    def status_code(self) -> Optional[int]:
        """HTTP status of the relay response behind this error, if any."""
        return (self.details or {}).get("status_code")


class AuthError(PushoverError):
    def __init__(self, message: str, code: str = AUTH_ERROR):
        super().__init__(code, message)

    @property
    def needs_twofa(self) -> bool:
        return self.code == TWOFA_REQUIRED


class RegistrationError(PushoverError):
    """The relay refused the device name or the secret."""

    def __init__(self, message: str, code: str = REGISTRATION_ERROR, details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class ConnectionError(PushoverError):
    """The push stream failed. The session loop retries these, they never end the process."""

    def __init__(self, message: str):
        super().__init__(CONNECTION_ERROR, message)
