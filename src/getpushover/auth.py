"""
Auth module: user login and device registration.

Both calls are stateless; the caller keeps the returned secret and device id.
"""

from typing import Any, Optional

import httpx

from getpushover.transport.http import HttpClient
from getpushover.errors import TWOFA_REQUIRED, AuthError, PushoverError, RegistrationError

DEVICE_OS = "O"
NAME_TAKEN = "has already been taken"


def _name_taken(details: Optional[dict[str, Any]]) -> bool:
    body = (details or {}).get("body")
    if not isinstance(body, dict):
        return False
    errors = body.get("errors")
    if not isinstance(errors, dict):
        return False
    return NAME_TAKEN in (errors.get("name") or [])


class Auth:
    def __init__(self, http: HttpClient):
        self._http = http

    async def login(self, email: str, password: str, twofa: Optional[str] = None) -> str:
        """Log in with account email and password; returns the user secret."""
        form = {"email": email, "password": password}
        if twofa:
            form["twofa"] = twofa
        try:
            result = await self._http.post("/users/login.json", form)
        except PushoverError as e:
            if e.status_code == 412:
                raise AuthError("Two-factor authentication code required", code=TWOFA_REQUIRED)
            raise AuthError(f"Login failed: {e}")
        except httpx.HTTPError as e:
            raise AuthError(f"Login request failed: {e}")
        if not isinstance(result, dict) or result.get("status") != 1 or not result.get("secret"):
            raise AuthError(f"Login rejected: {result}")
        return result["secret"]

    async def register_device(
        self, secret: str, name: str, current_device_id: Optional[str] = None,
    ) -> Optional[str]:
        """Register this device under `name`; returns the device id.

        A name that is already registered is not an error: the caller's
        current device id is returned unchanged.
        """
        try:
            result = await self._http.post(
                "/devices.json", {"secret": secret, "name": name, "os": DEVICE_OS},
            )
        except PushoverError as e:
            if _name_taken(e.details):
                return current_device_id
            raise RegistrationError(f"Device registration failed: {e}", details=e.details)
        except httpx.HTTPError as e:
            raise RegistrationError(f"Device registration request failed: {e}")
        if not isinstance(result, dict) or result.get("status") != 1 or not result.get("id"):
            raise RegistrationError(f"Device registration rejected: {result}")
        return result["id"]
