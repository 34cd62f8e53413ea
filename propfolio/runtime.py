"""Application wiring: theme, session gate and the per-session store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, TypeVar

from propfolio.backup import BackupScheduler
from propfolio.config import PropfolioConfig
from propfolio.exceptions import PersistenceError, ReconciliationError
from propfolio.models import Session
from propfolio.persistence import (
    InMemoryBackend,
    InMemoryLocalStorage,
    JsonFileBackend,
    JsonFileLocalStorage,
    LocalStorage,
    PortfolioBackend,
)
from propfolio.session import Blocking, IdentityProvider, Redirect, SessionGate
from propfolio.store import PortfolioStore, PurgedIds, ReconciliationLatch
from propfolio.theme import StyleSubstrate, ThemeEngine

logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_backend(config: PropfolioConfig) -> PortfolioBackend:
    """Build the persistence backend named by ``config.storage.backend``."""
    backend = config.storage.backend
    if backend == "json":
        return JsonFileBackend(config.storage.properties_path, pretty=True)
    if backend == "postgres":
        from propfolio.persistence.postgres import PostgresBackend

        pg = PostgresBackend(config.postgres.connection_string)
        pg.ensure_schema()
        return pg
    return InMemoryBackend()


def create_local_storage(config: PropfolioConfig) -> LocalStorage:
    if config.storage.backend == "memory":
        return InMemoryLocalStorage()
    return JsonFileLocalStorage(config.storage.local_storage_path)


class PropfolioApp:
    """Composes the three state containers behind one lifecycle.

    The theme engine is process-wide. A portfolio store exists only while a
    user is signed in: it is created and loaded when the session becomes
    authenticated and closed when it ends. The reconciliation latch outlives
    individual stores, so signing out and back in does not reconcile again.
    Purged ids are kept the same way.

    Parameters
    ----------
    config : PropfolioConfig
        Application configuration.
    identity : IdentityProvider
        Identity collaborator driving the session gate.
    backend : PortfolioBackend | None
        Persistence backend (default: built from ``config``).
    storage : LocalStorage | None
        Durable local storage (default: built from ``config``).
    """

    def __init__(
        self,
        config: PropfolioConfig,
        identity: IdentityProvider,
        backend: PortfolioBackend | None = None,
        storage: LocalStorage | None = None,
    ) -> None:
        self.config = config
        self.backend = backend if backend is not None else create_backend(config)
        self.storage = storage if storage is not None else create_local_storage(config)
        self.substrate = StyleSubstrate()
        self.theme = ThemeEngine(
            self.storage,
            self.substrate,
            default_palette=config.theme.default_palette,
            default_dark_mode=config.theme.default_dark_mode,
        )
        self.session = SessionGate(identity)
        self.backups = BackupScheduler(
            self.storage,
            Path(config.backup.output_dir),
            default_frequency=config.backup.frequency,
        )
        self.latch = ReconciliationLatch()
        self.purged = PurgedIds()
        self.store: PortfolioStore | None = None
        self._unsubscribe: Callable[[], None] | None = None

    def start(self) -> None:
        """Publish the theme and begin following the identity stream."""
        self.theme.start()
        if self._unsubscribe is None:
            self._unsubscribe = self.session.subscribe(self._on_session_change)
        self.session.activate()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.session.close()
        self._close_store()
        close_backend = getattr(self.backend, "close", None)
        if callable(close_backend):
            close_backend()

    def guard(self, render: Callable[[PortfolioStore], T]) -> T | Redirect | Blocking:
        """Render a protected view with the signed-in user's store."""
        return self.session.guard(lambda: render(self._require_store()))

    def backup_now(self) -> Path:
        return self.backups.perform(self._require_store().list())

    def _require_store(self) -> PortfolioStore:
        if self.store is None:
            raise PersistenceError("No portfolio store: nobody is signed in")
        return self.store

    def _on_session_change(self, session: Session) -> None:
        if session.is_authenticated and session.user is not None:
            self._open_store(session.user.uid)
        elif not session.is_loading:
            self._close_store()

    def _open_store(self, scope: str) -> None:
        self._close_store()
        reconciliation = self.config.reconciliation
        store = PortfolioStore(
            self.backend,
            scope,
            latch=self.latch,
            purged=self.purged,
            placeholder_prefix=reconciliation.placeholder_prefix,
            reconcile_on_load=reconciliation.enabled,
        )
        self.store = store
        try:
            store.load()
        except ReconciliationError as e:
            logger.error(
                "Reconciliation for %s incomplete (deleted=%s, inserted=%s): %s",
                scope,
                e.deleted,
                e.inserted,
                e,
            )
        except PersistenceError as e:
            logger.error("Could not load portfolio for %s: %s", scope, e)

    def _close_store(self) -> None:
        if self.store is not None:
            self.store.close()
            self.store = None
