"""Persistence collaborator interfaces.

Contract: simple remote CRUD for portfolio records, last-write-wins, plus a
scalar key/value store for local preferences.
"""

from typing import Any, Mapping, Protocol

from propfolio.models import Property


class PortfolioBackend(Protocol):
    def list_all(self, scope: str) -> list[Property]:
        """Return every stored property belonging to ``scope``."""
        ...

    def create(self, entity: Property) -> Property:
        """Store a new property and return the stored version."""
        ...

    def update(self, entity_id: str, patch: Mapping[str, Any]) -> Property:
        """Merge ``patch`` into a stored property and return it."""
        ...

    def delete(self, entity_id: str) -> None:
        """Remove a property. Deleting an absent id is not an error."""
        ...


class LocalStorage(Protocol):
    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...
