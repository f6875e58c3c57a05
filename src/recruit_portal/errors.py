"""Error taxonomy shared by the store, the auth layer and the API."""

from __future__ import annotations

import logging
import threading

log = logging.getLogger(__name__)

AUTH_MESSAGES = {
    "invalid_credentials": "Invalid email or password. Please try again.",
    "email_in_use": "This email address is already in use by another account.",
    "account_type_mismatch": "This account is not registered for the selected login type.",
    "no_account_for_phone": "No account was found for this mobile number.",
}

AUTH_STATUS = {
    "invalid_credentials": 401,
    "email_in_use": 409,
    "account_type_mismatch": 403,
    "no_account_for_phone": 404,
}


class PortalError(Exception):
    """Base class for errors the portal reports to its users."""


class AuthError(PortalError):
    def __init__(self, code: str) -> None:
        self.code = code
        self.status_code = AUTH_STATUS.get(code, 401)
        super().__init__(AUTH_MESSAGES.get(code, "Authentication failed."))


class PermissionDeniedError(PortalError):
    def __init__(self, collection: str) -> None:
        self.collection = collection
        super().__init__(f"Missing or insufficient permissions to read '{collection}'.")


class WriteError(PortalError):
    """A create/update/delete did not go through. The caller must re-trigger it."""

    def __init__(self, action: str, collection: str, reason: str) -> None:
        self.action = action
        self.collection = collection
        super().__init__(f"Could not {action} {collection}: {reason}")


class InitErrorLog:
    """Collects initialisation errors, reporting each distinct message once."""

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self._messages: list[str] = []
        self._lock = threading.Lock()

    def record(self, error: Exception | str) -> bool:
        message = str(error)
        with self._lock:
            if message in self._seen:
                return False
            self._seen.add(message)
            self._messages.append(message)
        log.warning("Initialisation error: %s", message)
        return True

    @property
    def messages(self) -> list[str]:
        with self._lock:
            return list(self._messages)

    def clear(self) -> None:
        with self._lock:
            self._seen.clear()
            self._messages.clear()
