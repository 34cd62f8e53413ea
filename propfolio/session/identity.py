"""Identity collaborator interface, error classification and a dev provider."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Protocol

from propfolio.exceptions import IdentityError
from propfolio.models import User

logger = logging.getLogger(__name__)

IdentityListener = Callable[["User | None"], None]


class IdentityErrorKind(str, Enum):
    INVALID_CREDENTIAL = "invalid-credential"
    PROVIDER_DISABLED = "provider-disabled"
    NETWORK = "network"
    UNKNOWN = "unknown"


class IdentityProviderError(Exception):
    """Raw failure reported by an identity provider, identified by ``code``."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code = code
        self.message = message


class IdentityProvider(Protocol):
    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register for sign-in/sign-out notifications; returns the unsubscriber."""
        ...

    def login_with_credentials(self, identifier: str, secret: str) -> User:
        ...

    def login_with_external_provider(self) -> User:
        ...

    def register(self, identifier: str, secret: str, display_name: str) -> User:
        ...

    def logout(self) -> None:
        ...


# Provider codes -> (kind, message shown to the user)
ERROR_CODES: dict[str, tuple[IdentityErrorKind, str]] = {
    "auth/user-not-found": (
        IdentityErrorKind.INVALID_CREDENTIAL,
        "Invalid email or password. Please try again.",
    ),
    "auth/wrong-password": (
        IdentityErrorKind.INVALID_CREDENTIAL,
        "Invalid email or password. Please try again.",
    ),
    "auth/invalid-credential": (
        IdentityErrorKind.INVALID_CREDENTIAL,
        "Invalid email or password. Please try again.",
    ),
    "auth/email-already-in-use": (
        IdentityErrorKind.INVALID_CREDENTIAL,
        "An account already exists for this email.",
    ),
    "auth/weak-password": (
        IdentityErrorKind.INVALID_CREDENTIAL,
        "Password should be at least 6 characters.",
    ),
    "auth/operation-not-allowed": (
        IdentityErrorKind.PROVIDER_DISABLED,
        "This sign-in method is not enabled.",
    ),
    "auth/network-request-failed": (
        IdentityErrorKind.NETWORK,
        "Network error. Check your connection and try again.",
    ),
}

DEFAULT_FAILURE_MESSAGE = "Failed to sign in. Please check your credentials."


def classify_identity_error(
    error: Exception,
    fallback: str = DEFAULT_FAILURE_MESSAGE,
) -> IdentityError:
    """Map any provider failure onto the four-kind taxonomy."""
    if isinstance(error, IdentityError):
        return error
    if isinstance(error, IdentityProviderError):
        if error.code in ERROR_CODES:
            kind, message = ERROR_CODES[error.code]
            return IdentityError(kind.value, message)
        return IdentityError(IdentityErrorKind.UNKNOWN.value, error.message or fallback)
    if isinstance(error, (ConnectionError, TimeoutError)):
        return IdentityError(
            IdentityErrorKind.NETWORK.value,
            ERROR_CODES["auth/network-request-failed"][1],
        )
    return IdentityError(IdentityErrorKind.UNKNOWN.value, str(error) or fallback)


class InMemoryIdentityProvider:
    """Identity provider keeping accounts in memory, for development and tests.

    Notifications are delivered synchronously. With ``emit_on_subscribe``
    a new subscriber immediately receives the current user, like hosted
    providers do once they have restored a session.
    """

    def __init__(
        self,
        external_user: User | None = None,
        emit_on_subscribe: bool = True,
        password_enabled: bool = True,
    ) -> None:
        self._accounts: dict[str, tuple[str, User]] = {}
        self._external_user = external_user
        self._emit_on_subscribe = emit_on_subscribe
        self._password_enabled = password_enabled
        self._current: User | None = None
        self._listeners: list[IdentityListener] = []
        self._lock = threading.Lock()

    @property
    def current_user(self) -> User | None:
        return self._current

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def add_account(self, identifier: str, secret: str, user: User) -> None:
        self._accounts[identifier.lower()] = (secret, user)

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)
        if self._emit_on_subscribe:
            listener(self._current)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def login_with_credentials(self, identifier: str, secret: str) -> User:
        if not self._password_enabled:
            raise IdentityProviderError("auth/operation-not-allowed")
        account = self._accounts.get(identifier.lower())
        if account is None or account[0] != secret:
            raise IdentityProviderError("auth/invalid-credential")
        self.emit(account[1])
        return account[1]

    def login_with_external_provider(self) -> User:
        if self._external_user is None:
            raise IdentityProviderError("auth/operation-not-allowed")
        self.emit(self._external_user)
        return self._external_user

    def register(self, identifier: str, secret: str, display_name: str) -> User:
        if not self._password_enabled:
            raise IdentityProviderError("auth/operation-not-allowed")
        if identifier.lower() in self._accounts:
            raise IdentityProviderError("auth/email-already-in-use")
        if len(secret) < 6:
            raise IdentityProviderError("auth/weak-password")
        user = User(
            uid=f"user-{len(self._accounts) + 1}",
            display_name=display_name,
            email=identifier,
        )
        self.add_account(identifier, secret, user)
        self.emit(user)
        return user

    def logout(self) -> None:
        self.emit(None)

    def emit(self, user: User | None) -> None:
        """Change the signed-in user and notify every subscriber."""
        with self._lock:
            self._current = user
            listeners = list(self._listeners)
        logger.debug("Identity changed: %s", user.uid if user else None)
        for listener in listeners:
            listener(user)
