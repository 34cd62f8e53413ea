"""Portfolio entity store with lifecycle transitions and reconciliation."""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator, Mapping

from propfolio.exceptions import (
    EntityNotFoundError,
    InvalidEntityStateError,
    PersistenceError,
    PropfolioError,
    ReconciliationError,
)
from propfolio.models import (
    Property,
    PropertyDraft,
    PropertyStatus,
    build_property,
    validate_patch,
)
from propfolio.persistence.base import PortfolioBackend
from propfolio.store.seed import (
    AUTHORITATIVE_PORTFOLIO,
    DEFAULT_PLACEHOLDER_PREFIX,
    is_placeholder,
)

logger = logging.getLogger(__name__)

StoreListener = Callable[[str, str | None], None]


@dataclass
class ReconciliationReport:
    """Outcome of one reconciliation pass."""

    deleted: list[str] = field(default_factory=list)
    inserted: list[str] = field(default_factory=list)
    skipped: bool = False  # The latch had already fired for this session

    @property
    def mutations(self) -> int:
        return len(self.deleted) + len(self.inserted)


class ReconciliationLatch:
    """One-shot latch keyed by session scope.

    Shared across store instances so a store rebuilt within the same
    session does not reconcile a second time.
    """

    def __init__(self) -> None:
        self._fired: set[str] = set()
        self._lock = threading.Lock()

    def acquire(self, key: str) -> bool:
        """Fire the latch for ``key``; False if it had already fired."""
        with self._lock:
            if key in self._fired:
                return False
            self._fired.add(key)
            return True

    def has_fired(self, key: str) -> bool:
        with self._lock:
            return key in self._fired


class PurgedIds:
    """Ids permanently deleted in each scope.

    Outlives individual stores so repeating a permanent delete stays a
    no-op after the store is rebuilt.
    """

    def __init__(self) -> None:
        self._by_scope: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def for_scope(self, scope: str) -> set[str]:
        with self._lock:
            return self._by_scope.setdefault(scope, set())


class PortfolioStore:
    """In-memory cache of one user's properties mirrored to a backend.

    Mutations are applied to the cache first and then sent to the backend;
    a failed round trip rolls the cache entry back and re-raises
    :class:`PersistenceError`. Operations on the same id are serialized,
    different ids may interleave. Last write wins.

    Parameters
    ----------
    backend : PortfolioBackend
        Persistence collaborator.
    scope : str
        Id of the user whose portfolio this store serves.
    latch : ReconciliationLatch | None
        Session latch guarding the reconciliation pass.
    replacements : Iterable[PropertyDraft] | None
        Authoritative records that replace placeholders.
    placeholder_prefix : str
        Reserved id prefix marking placeholder records.
    reconcile_on_load : bool
        Run reconciliation at the end of :meth:`load`.
    """

    def __init__(
        self,
        backend: PortfolioBackend,
        scope: str,
        *,
        latch: ReconciliationLatch | None = None,
        purged: PurgedIds | None = None,
        replacements: Iterable[PropertyDraft] | None = None,
        placeholder_prefix: str = DEFAULT_PLACEHOLDER_PREFIX,
        reconcile_on_load: bool = True,
    ) -> None:
        self.scope = scope
        self._backend = backend
        self._latch = latch or ReconciliationLatch()
        self._replacements = tuple(
            AUTHORITATIVE_PORTFOLIO if replacements is None else replacements
        )
        self._placeholder_prefix = placeholder_prefix
        self._reconcile_on_load = reconcile_on_load

        self._entities: dict[str, Property] = {}
        self._purged: set[str] = (purged or PurgedIds()).for_scope(scope)
        self._lock = threading.RLock()
        self._id_locks: dict[str, threading.Lock] = {}
        self._listeners: list[StoreListener] = []
        self._closed = False

        self.loading = False
        self.loaded = False

    # Lifecycle
    def load(self) -> ReconciliationReport:
        """Fetch the scope's records, then run the one-shot reconciliation."""
        self._ensure_open()
        self.loading = True
        try:
            entities = self._backend.list_all(self.scope)
        finally:
            self.loading = False

        if self._closed:
            logger.debug("Store for %s closed during load; discarding results", self.scope)
            return ReconciliationReport(skipped=True)

        with self._lock:
            self._entities = {e.id: e for e in entities}
            self.loaded = True
        logger.info(
            "Loaded %d properties for %s", len(entities), self.scope, extra={"scope": self.scope}
        )
        self._notify("loaded", None)

        if not self._reconcile_on_load:
            return ReconciliationReport(skipped=True)
        return self.reconcile()

    def close(self) -> None:
        """Tear the store down; late backend results are discarded."""
        with self._lock:
            self._closed = True
            self._listeners.clear()

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register ``listener(event, entity_id)``; returns the unsubscriber."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # Queries
    def list(self) -> list[Property]:
        """All active and trashed properties, in insertion order."""
        with self._lock:
            return [copy.deepcopy(p) for p in self._entities.values()]

    def active(self) -> list[Property]:
        return [p for p in self.list() if p.status == PropertyStatus.ACTIVE]

    def trashed(self) -> list[Property]:
        return [p for p in self.list() if p.status == PropertyStatus.TRASHED]

    def get(self, entity_id: str) -> Property:
        with self._lock:
            return copy.deepcopy(self._require(entity_id))

    def search(self, term: str, include_trashed: bool = False) -> list[Property]:
        """Case-insensitive match on address or postcode."""
        needle = term.strip().lower()
        candidates = self.list() if include_trashed else self.active()
        return [
            p for p in candidates
            if needle in p.address.lower() or needle in p.postcode.lower()
        ]

    def summary(self) -> dict[str, int]:
        """Return counts per lifecycle state."""
        with self._lock:
            trashed = sum(1 for p in self._entities.values() if p.is_trashed)
            return {
                "active": len(self._entities) - trashed,
                "trashed": trashed,
                "permanently_deleted": len(self._purged),
            }

    # Mutations
    def add(self, draft: PropertyDraft | Mapping[str, Any]) -> Property:
        """Create an active property with a fresh id and empty collections."""
        if not isinstance(draft, PropertyDraft):
            draft = PropertyDraft.from_mapping(draft)

        with self._lock:
            self._ensure_open()
            entity = build_property(draft, self._new_id(), self.scope)
            self._entities[entity.id] = entity
        self._notify("added", entity.id)

        self._mirror(entity.id, None, lambda: self._backend.create(copy.deepcopy(entity)))
        logger.debug("Added property %s", entity.id)
        return copy.deepcopy(entity)

    def update(self, entity_id: str, patch: Mapping[str, Any]) -> Property:
        """Merge ``patch`` into an active or trashed property."""
        changes = validate_patch(patch)
        changes["updated_at"] = datetime.now()
        return self._transition(entity_id, "updated", changes)

    def soft_delete(self, entity_id: str) -> Property:
        """Move an active property to the trash, keeping its data."""
        return self._transition(
            entity_id,
            "trashed",
            {"status": PropertyStatus.TRASHED, "deleted_at": datetime.now()},
            require=PropertyStatus.ACTIVE,
        )

    def restore(self, entity_id: str) -> Property:
        """Bring a trashed property back to active."""
        return self._transition(
            entity_id,
            "restored",
            {"status": PropertyStatus.ACTIVE, "deleted_at": None},
            require=PropertyStatus.TRASHED,
        )

    def permanently_delete(self, entity_id: str) -> None:
        """Remove a property for good. Repeating the call is a no-op."""
        with self._entity_lock(entity_id):
            with self._lock:
                self._ensure_open()
                if entity_id in self._purged:
                    return
                previous = self._require(entity_id)
                order = list(self._entities)
                del self._entities[entity_id]
                self._purged.add(entity_id)
            self._notify("deleted", entity_id)

            try:
                self._backend.delete(entity_id)
            except PersistenceError:
                with self._lock:
                    self._purged.discard(entity_id)
                    self._entities[entity_id] = previous
                    self._entities = {k: self._entities[k] for k in order if k in self._entities}
                self._notify("rolled_back", entity_id)
                raise
        with self._lock:
            self._id_locks.pop(entity_id, None)
        logger.debug("Permanently deleted property %s", entity_id)

    def import_entities(self, entities: Iterable[Property]) -> list[Property]:
        """Add previously exported properties, each under a fresh id.

        Child collections and optional records are carried over; the
        lifecycle state is reset to active.
        """
        imported = []
        for source in entities:
            created = self.add(
                PropertyDraft(
                    address=source.address,
                    postcode=source.postcode,
                    property_type=source.property_type,
                    valuation=source.valuation,
                    purchase_date=source.purchase_date,
                    image_url=source.image_url,
                    owner=source.owner,
                    description=source.description,
                    capacity=source.capacity,
                )
            )
            extras = {
                name: copy.deepcopy(getattr(source, name))
                for name in (
                    "mortgage",
                    "buildings_insurance",
                    "gas_certificate",
                    "eicr_certificate",
                    "epc_certificate",
                    "utilities",
                    "insurances",
                    "tenants",
                    "documents",
                    "transactions",
                    "maintenance_tickets",
                )
            }
            imported.append(self.update(created.id, extras))
        logger.info(
            "Imported %d properties for %s", len(imported), self.scope, extra={"scope": self.scope}
        )
        return imported

    # Reconciliation
    def reconcile(self) -> ReconciliationReport:
        """Replace placeholder records with the authoritative set, once per session.

        Replacements are inserted first. If an insert fails, the ones
        already written are removed again and the placeholders stay
        untouched. If a placeholder delete fails, the completed subset is
        kept (the cache mirrors the backend) and the failure is raised for
        manual follow-up. Nothing is retried.
        """
        if not self._latch.acquire(self.scope):
            logger.debug("Reconciliation already ran for %s", self.scope)
            return ReconciliationReport(skipped=True)

        with self._lock:
            self._ensure_open()
            placeholders = [
                p.id for p in self._entities.values()
                if is_placeholder(p, self._placeholder_prefix)
            ]
            replacements = []
            for draft in self._replacements:
                replacements.append(
                    build_property(draft, self._new_id({r.id for r in replacements}), self.scope)
                )

        report = ReconciliationReport()
        if not placeholders:
            return report

        logger.info(
            "Replacing %d placeholder properties for %s",
            len(placeholders),
            self.scope,
            extra={"scope": self.scope},
        )

        created: list[Property] = []
        try:
            for entity in replacements:
                self._backend.create(copy.deepcopy(entity))
                created.append(entity)
        except PersistenceError as e:
            leftover = self._undo_inserts(created)
            raise ReconciliationError(
                f"Reconciliation for {self.scope} aborted while inserting replacements: {e}",
                inserted=leftover,
            ) from e

        if self._closed:
            leftover = self._undo_inserts(created)
            if leftover:
                raise ReconciliationError(
                    f"Store for {self.scope} closed during reconciliation; "
                    f"replacements {leftover} need manual removal",
                    inserted=leftover,
                )
            logger.info(
                "Store for %s closed during reconciliation; replacements withdrawn", self.scope
            )
            return report

        with self._lock:
            for entity in created:
                self._entities[entity.id] = entity
        report.inserted = [e.id for e in created]

        for entity_id in placeholders:
            try:
                self._backend.delete(entity_id)
            except PersistenceError as e:
                logger.error(
                    "Reconciliation for %s stopped after %d of %d deletes; "
                    "placeholder %s needs manual removal",
                    self.scope,
                    len(report.deleted),
                    len(placeholders),
                    entity_id,
                    extra={
                        "scope": self.scope,
                        "entity_id": entity_id,
                        "extra": {"deleted": report.deleted, "inserted": report.inserted},
                    },
                )
                self._notify("reconciled", None)
                raise ReconciliationError(
                    f"Reconciliation for {self.scope} failed deleting {entity_id}: {e}",
                    deleted=report.deleted,
                    inserted=report.inserted,
                ) from e
            with self._lock:
                self._entities.pop(entity_id, None)
                self._purged.add(entity_id)
            report.deleted.append(entity_id)

        self._notify("reconciled", None)
        logger.info(
            "Reconciliation for %s inserted %d and deleted %d properties",
            self.scope,
            len(report.inserted),
            len(report.deleted),
            extra={"scope": self.scope},
        )
        return report

    def _undo_inserts(self, created: list[Property]) -> list[str]:
        """Delete replacements written before a failed insert.

        Returns the ids that could not be removed.
        """
        leftover = []
        for entity in created:
            try:
                self._backend.delete(entity.id)
            except PersistenceError:
                logger.error(
                    "Could not remove replacement %s after failed reconciliation", entity.id
                )
                leftover.append(entity.id)
        return leftover

    # Internals
    def _transition(
        self,
        entity_id: str,
        event: str,
        changes: dict[str, Any],
        require: PropertyStatus | None = None,
    ) -> Property:
        with self._entity_lock(entity_id):
            with self._lock:
                self._ensure_open()
                previous = self._require(entity_id)
                if require is not None and previous.status != require:
                    raise InvalidEntityStateError(
                        f"Property {entity_id} is {previous.status.value.lower()}, "
                        f"expected {require.value.lower()}"
                    )
                current = copy.deepcopy(previous)
                for name, value in changes.items():
                    setattr(current, name, value)
                self._entities[entity_id] = current
            self._notify(event, entity_id)

            stored = self._mirror(
                entity_id, previous, lambda: self._backend.update(entity_id, copy.deepcopy(changes))
            )
            if stored is not None:
                with self._lock:
                    if entity_id in self._entities:
                        self._entities[entity_id] = stored
                        current = stored
            return copy.deepcopy(current)

    def _mirror(
        self,
        entity_id: str,
        previous: Property | None,
        call: Callable[[], Property | None],
    ) -> Property | None:
        """Run a backend round trip, rolling the cache entry back on failure.

        Returns None when the store was closed before the call returned.
        """
        try:
            result = call()
        except PersistenceError:
            logger.warning(
                "Backend rejected change to %s; rolling back",
                entity_id,
                extra={"scope": self.scope, "entity_id": entity_id},
            )
            with self._lock:
                if previous is None:
                    self._entities.pop(entity_id, None)
                else:
                    self._entities[entity_id] = previous
            self._notify("rolled_back", entity_id)
            raise
        if self._closed:
            logger.debug("Store closed; discarding backend result for %s", entity_id)
            return None
        return result

    def _require(self, entity_id: str) -> Property:
        try:
            return self._entities[entity_id]
        except KeyError:
            raise EntityNotFoundError(f"Property {entity_id} not found") from None

    def _new_id(self, reserved: set[str] | None = None) -> str:
        while True:
            candidate = f"prop-{uuid.uuid4().hex[:12]}"
            if (
                candidate not in self._entities
                and candidate not in self._purged
                and candidate not in (reserved or ())
            ):
                return candidate

    @contextmanager
    def _entity_lock(self, entity_id: str) -> Iterator[None]:
        with self._lock:
            lock = self._id_locks.setdefault(entity_id, threading.Lock())
        with lock:
            yield

    def _ensure_open(self) -> None:
        if self._closed:
            raise PropfolioError(f"Portfolio store for {self.scope} is closed")

    def _notify(self, event: str, entity_id: str | None) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event, entity_id)
