"""Session state exposed by the session gate."""

from dataclasses import dataclass
from enum import Enum


class SessionStatus(str, Enum):
    LOADING = "LOADING"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    AUTHENTICATED = "AUTHENTICATED"


@dataclass(frozen=True)
class User:
    """Identity reported by the identity provider."""

    uid: str
    display_name: str = ""
    avatar_url: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class Session:
    """Immutable snapshot of the authenticated-identity state machine."""

    status: SessionStatus = SessionStatus.LOADING
    user: User | None = None

    @classmethod
    def loading(cls) -> "Session":
        return cls(SessionStatus.LOADING)

    @classmethod
    def unauthenticated(cls) -> "Session":
        return cls(SessionStatus.UNAUTHENTICATED)

    @classmethod
    def authenticated(cls, user: User) -> "Session":
        return cls(SessionStatus.AUTHENTICATED, user)

    @property
    def is_authenticated(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.status == SessionStatus.LOADING
