"""Authenticated-identity state and route guarding."""

from propfolio.session.gate import BLOCKING, Blocking, Redirect, SessionGate
from propfolio.session.identity import (
    IdentityErrorKind,
    IdentityProvider,
    IdentityProviderError,
    InMemoryIdentityProvider,
    classify_identity_error,
)

__all__ = [
    "BLOCKING",
    "Blocking",
    "IdentityErrorKind",
    "IdentityProvider",
    "IdentityProviderError",
    "InMemoryIdentityProvider",
    "Redirect",
    "SessionGate",
    "classify_identity_error",
]
