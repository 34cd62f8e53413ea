"""PostgreSQL persistence backend."""

import logging
from typing import Any, Mapping

import psycopg
from psycopg.types.json import Jsonb

from propfolio.exceptions import PersistenceError
from propfolio.models import Property, merge_fields
from propfolio.persistence.serialization import property_from_dict, property_to_dict

logger = logging.getLogger(__name__)


class PostgresBackend:
    """Store each property as a JSONB document keyed by id.

    The owning user id is kept in its own column so ``list_all`` can
    filter without unpacking documents.
    """

    TABLE = "properties"

    SCHEMA = f"""
        CREATE TABLE IF NOT EXISTS {TABLE} (
            id TEXT PRIMARY KEY,
            user_id TEXT,
            data JSONB NOT NULL,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """

    def __init__(self, connection_string: str) -> None:
        """Initialize PostgreSQL backend.

        Parameters
        ----------
        connection_string : str
            PostgreSQL connection string.
        """
        self.conn = psycopg.connect(connection_string)

    def ensure_schema(self) -> None:
        """Create the properties table if it does not exist."""
        self._execute(self.SCHEMA)

    def list_all(self, scope: str) -> list[Property]:
        """Return the records stored under ``scope``."""
        rows = self._execute(
            f"SELECT data FROM {self.TABLE} WHERE user_id = %s ORDER BY updated_at",
            (scope,),
            fetch=True,
        )
        return [property_from_dict(row[0]) for row in rows]

    def create(self, entity: Property) -> Property:
        """Insert a new record."""
        self._execute(
            f"INSERT INTO {self.TABLE} (id, user_id, data) VALUES (%s, %s, %s)",
            (entity.id, entity.user_id, Jsonb(property_to_dict(entity))),
        )
        return entity

    def update(self, entity_id: str, patch: Mapping[str, Any]) -> Property:
        """Merge a patch into a stored record (read, merge, write)."""
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    f"SELECT data FROM {self.TABLE} WHERE id = %s FOR UPDATE",
                    (entity_id,),
                )
                row = cur.fetchone()
                if row is None:
                    self.conn.rollback()
                    raise PersistenceError(f"Property {entity_id} not found")
                updated = merge_fields(property_from_dict(row[0]), patch)
                cur.execute(
                    f"UPDATE {self.TABLE} SET data = %s, updated_at = now() WHERE id = %s",
                    (Jsonb(property_to_dict(updated)), entity_id),
                )
            self.conn.commit()
        except psycopg.Error as e:
            self.conn.rollback()
            raise PersistenceError(f"Failed to update property {entity_id}: {e}") from e
        return updated

    def delete(self, entity_id: str) -> None:
        """Remove a record if present."""
        self._execute(f"DELETE FROM {self.TABLE} WHERE id = %s", (entity_id,))

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def _execute(
        self,
        sql: str,
        params: tuple | None = None,
        fetch: bool = False,
    ) -> list[tuple]:
        try:
            with self.conn.cursor() as cur:
                cur.execute(sql, params)
                rows = cur.fetchall() if fetch else []
            self.conn.commit()
        except psycopg.Error as e:
            self.conn.rollback()
            logger.error("Query failed: %s", e)
            raise PersistenceError(str(e)) from e
        return rows
