"""JSON file persistence backend."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

from propfolio.exceptions import PersistenceError
from propfolio.models import Property, merge_fields
from propfolio.persistence.serialization import property_from_dict, property_to_dict

logger = logging.getLogger(__name__)


class JsonFileBackend:
    """Persist portfolio records as a JSON array in a single file."""

    def __init__(self, path: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file backend.

        Parameters
        ----------
        path : str | Path
            File holding the records. Created on first write.
        pretty : bool
            Pretty-print JSON output.
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty

    def list_all(self, scope: str) -> list[Property]:
        """Return the records stored under ``scope``."""
        return [p for p in self._read() if p.user_id == scope]

    def create(self, entity: Property) -> Property:
        """Append a new record."""
        records = self._read()
        if any(p.id == entity.id for p in records):
            raise PersistenceError(f"Property {entity.id} already exists")
        records.append(entity)
        self._write(records)
        return entity

    def update(self, entity_id: str, patch: Mapping[str, Any]) -> Property:
        """Merge a patch into a stored record."""
        records = self._read()
        for idx, prop in enumerate(records):
            if prop.id == entity_id:
                records[idx] = merge_fields(prop, patch)
                self._write(records)
                return records[idx]
        raise PersistenceError(f"Property {entity_id} not found")

    def delete(self, entity_id: str) -> None:
        """Remove a record if present."""
        records = self._read()
        remaining = [p for p in records if p.id != entity_id]
        if len(remaining) != len(records):
            self._write(remaining)

    def _read(self) -> list[Property]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return [property_from_dict(item) for item in data]
        except (OSError, ValueError, TypeError, KeyError) as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e

    def _write(self, records: list[Property]) -> None:
        data = [property_to_dict(p) for p in records]
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e
        logger.debug("Wrote %d records to %s", len(records), self.path)
