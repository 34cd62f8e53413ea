"""Session gate: the authenticated-identity state machine and route guard."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, TypeVar

from propfolio.models import Session, SessionStatus, User
from propfolio.session.identity import (
    IdentityProvider,
    classify_identity_error,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SessionListener = Callable[[Session], None]


@dataclass(frozen=True)
class Redirect:
    """Instruction for the routing surface to navigate elsewhere."""

    path: str
    replace: bool = True


class Blocking:
    """Indicator rendered while the session is still being resolved."""

    def __repr__(self) -> str:
        return "BLOCKING"


BLOCKING = Blocking()


class SessionGate:
    """Expose session state driven only by identity notifications.

    Sign-in and sign-out calls go to the identity provider; the gate's
    state changes only when the provider reports the outcome through its
    change stream.

    Parameters
    ----------
    identity : IdentityProvider
        Identity collaborator.
    login_path : str
        Where unauthenticated visitors of guarded views are sent.
    home_path : str
        Where an authenticated visitor of the login view is sent.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        login_path: str = "/login",
        home_path: str = "/",
    ) -> None:
        self._identity = identity
        self.login_path = login_path
        self.home_path = home_path
        self._state = Session.loading()
        self._unsubscribe: Callable[[], None] | None = None
        self._listeners: list[SessionListener] = []
        self._lock = threading.Lock()
        self._closed = False
        self.error: str | None = None

    @property
    def state(self) -> Session:
        return self._state

    @property
    def user(self) -> User | None:
        return self._state.user

    def activate(self) -> None:
        """Subscribe to the identity change stream (once)."""
        if self._unsubscribe is not None:
            logger.debug("Session gate already active")
            return
        self._closed = False
        self._unsubscribe = self._identity.subscribe(self._on_identity_change)

    def close(self) -> None:
        """Unsubscribe from the identity stream and drop listeners."""
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        with self._lock:
            self._listeners.clear()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register ``listener(session)``; returns the unsubscriber."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _on_identity_change(self, user: User | None) -> None:
        if self._closed:
            return
        new_state = Session.authenticated(user) if user is not None else Session.unauthenticated()
        if new_state == self._state:
            return
        self._state = new_state
        if user is not None:
            self.error = None
        logger.info("Session is now %s", new_state.status.value.lower())
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(new_state)

    # Requests to the identity provider
    def sign_in(self, identifier: str, secret: str) -> str | None:
        """Ask the provider to sign in.

        Returns ``None`` on success, otherwise the failure message (also
        kept in ``error``).
        """
        return self._request(lambda: self._identity.login_with_credentials(identifier, secret))

    def sign_in_with_provider(self) -> str | None:
        return self._request(
            self._identity.login_with_external_provider,
            fallback="Failed to sign in with the external provider.",
        )

    def register(self, identifier: str, secret: str, display_name: str) -> str | None:
        return self._request(
            lambda: self._identity.register(identifier, secret, display_name),
            fallback="Failed to create the account.",
        )

    def sign_out(self) -> None:
        """Request sign-out without waiting for it; state follows the stream."""
        try:
            self._identity.logout()
        except Exception as e:
            self.error = str(classify_identity_error(e))
            logger.warning("Sign-out request failed: %s", self.error)

    def _request(self, call: Callable[[], object], fallback: str | None = None) -> str | None:
        self.error = None
        try:
            call()
        except Exception as e:
            classified = (
                classify_identity_error(e, fallback) if fallback else classify_identity_error(e)
            )
            self.error = str(classified)
            logger.info("Identity request failed (%s): %s", classified.kind, self.error)
            return self.error
        return None

    # Route guarding
    def guard(self, render: Callable[[], T]) -> T | Redirect | Blocking:
        """Render a protected view according to the session state.

        ``render`` is only called once the session is authenticated, so no
        data is fetched while the session is loading.
        """
        status = self._state.status
        if status == SessionStatus.AUTHENTICATED:
            return render()
        if status == SessionStatus.UNAUTHENTICATED:
            return Redirect(self.login_path)
        return BLOCKING

    def login_redirect(self) -> Redirect | None:
        """Redirect away from the login view once signed in."""
        if self._state.is_authenticated:
            return Redirect(self.home_path)
        return None
