"""In-memory persistence backend for development and tests."""

import copy
from typing import Any, Mapping

from propfolio.exceptions import PersistenceError
from propfolio.models import Property, merge_fields


class InMemoryBackend:
    """Keep portfolio records in a dict.

    Records are copied on the way in and out so callers never share
    mutable state with the "remote" side.
    """

    def __init__(self, records: list[Property] | None = None) -> None:
        self._records: dict[str, Property] = {}
        for record in records or []:
            self._records[record.id] = copy.deepcopy(record)

    def list_all(self, scope: str) -> list[Property]:
        """Return copies of the records stored under ``scope``."""
        return [copy.deepcopy(p) for p in self._records.values() if p.user_id == scope]

    def create(self, entity: Property) -> Property:
        """Store a new record."""
        if entity.id in self._records:
            raise PersistenceError(f"Property {entity.id} already exists")
        self._records[entity.id] = copy.deepcopy(entity)
        return copy.deepcopy(entity)

    def update(self, entity_id: str, patch: Mapping[str, Any]) -> Property:
        """Merge a patch into a stored record."""
        if entity_id not in self._records:
            raise PersistenceError(f"Property {entity_id} not found")
        updated = merge_fields(self._records[entity_id], copy.deepcopy(dict(patch)))
        self._records[entity_id] = updated
        return copy.deepcopy(updated)

    def delete(self, entity_id: str) -> None:
        """Remove a record if present."""
        self._records.pop(entity_id, None)

    def __len__(self) -> int:
        return len(self._records)
