"""Tests for application wiring."""

from pathlib import Path
from typing import Callable

import pytest
from conftest import FlakyBackend

from propfolio.config import PropfolioConfig, ReconciliationConfig, StorageConfig
from propfolio.exceptions import PersistenceError
from propfolio.models import Property, User
from propfolio.persistence import (
    InMemoryBackend,
    InMemoryLocalStorage,
    JsonFileBackend,
    JsonFileLocalStorage,
)
from propfolio.runtime import PropfolioApp, create_backend, create_local_storage
from propfolio.session import BLOCKING, InMemoryIdentityProvider, Redirect
from propfolio.store import PortfolioStore


@pytest.fixture
def provider() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider(emit_on_subscribe=False)


@pytest.fixture
def seeded_backend(make_property: Callable[..., Property]) -> FlakyBackend:
    return FlakyBackend(
        [make_property("demo-1", "12 Oak Avenue, Manchester"), make_property("real-1")]
    )


@pytest.fixture
def app(
    provider: InMemoryIdentityProvider,
    seeded_backend: FlakyBackend,
    local_storage: InMemoryLocalStorage,
    tmp_path: Path,
) -> PropfolioApp:
    config = PropfolioConfig()
    config.backup.output_dir = tmp_path / "backups"
    application = PropfolioApp(config, provider, backend=seeded_backend, storage=local_storage)
    application.start()
    return application


class TestFactories:
    """Tests for building collaborators from config."""

    def test_memory_backend(self) -> None:
        config = PropfolioConfig()

        assert isinstance(create_backend(config), InMemoryBackend)
        assert isinstance(create_local_storage(config), InMemoryLocalStorage)

    def test_json_backend(self, tmp_path: Path) -> None:
        config = PropfolioConfig(storage=StorageConfig(backend="json", data_dir=tmp_path))

        backend = create_backend(config)
        storage = create_local_storage(config)

        assert isinstance(backend, JsonFileBackend)
        assert backend.path == tmp_path / "properties.json"
        assert isinstance(storage, JsonFileLocalStorage)


class TestPropfolioApp:
    """Tests for the session-bound store lifecycle."""

    def test_theme_published_on_start(self, app: PropfolioApp) -> None:
        assert app.substrate.get_property("--font-main") == "Inter"

    def test_no_store_while_loading(self, app: PropfolioApp) -> None:
        assert app.store is None
        assert app.guard(lambda store: store.list()) is BLOCKING

    def test_sign_in_opens_reconciled_store(
        self, app: PropfolioApp, provider: InMemoryIdentityProvider, sample_user: User
    ) -> None:
        provider.emit(sample_user)

        assert isinstance(app.store, PortfolioStore)
        assert app.store.scope == sample_user.uid
        addresses = [p.address for p in app.store.list()]
        assert "12 Oak Avenue, Manchester" not in addresses
        assert "1 Test Road, York" in addresses

    def test_guard_renders_with_store(
        self, app: PropfolioApp, provider: InMemoryIdentityProvider, sample_user: User
    ) -> None:
        provider.emit(sample_user)

        count = app.guard(lambda store: len(store.active()))

        assert count == 4

    def test_sign_out_closes_store(
        self, app: PropfolioApp, provider: InMemoryIdentityProvider, sample_user: User
    ) -> None:
        provider.emit(sample_user)
        store = app.store

        provider.emit(None)

        assert app.store is None
        assert store is not None and store.closed
        assert app.guard(lambda s: s.list()) == Redirect("/login")

    def test_reconciliation_not_repeated_after_relogin(
        self,
        app: PropfolioApp,
        provider: InMemoryIdentityProvider,
        seeded_backend: FlakyBackend,
        sample_user: User,
    ) -> None:
        """Test the session latch survives store rebuilds."""
        provider.emit(sample_user)
        mutations = len(seeded_backend.mutations)

        provider.emit(None)
        provider.emit(sample_user)

        assert len(seeded_backend.mutations) == mutations

    def test_purge_repeatable_after_relogin(
        self, app: PropfolioApp, provider: InMemoryIdentityProvider, sample_user: User
    ) -> None:
        provider.emit(sample_user)
        assert app.store is not None
        app.store.permanently_delete("real-1")

        provider.emit(None)
        provider.emit(sample_user)
        app.store.permanently_delete("real-1")

        assert "real-1" not in [p.id for p in app.store.list()]

    def test_reconciliation_can_be_disabled(
        self,
        provider: InMemoryIdentityProvider,
        seeded_backend: FlakyBackend,
        local_storage: InMemoryLocalStorage,
        sample_user: User,
    ) -> None:
        config = PropfolioConfig(reconciliation=ReconciliationConfig(enabled=False))
        application = PropfolioApp(config, provider, backend=seeded_backend, storage=local_storage)
        application.start()

        provider.emit(sample_user)

        assert seeded_backend.mutations == []

    def test_backup_now(
        self, app: PropfolioApp, provider: InMemoryIdentityProvider, sample_user: User
    ) -> None:
        provider.emit(sample_user)

        path = app.backup_now()

        assert path.exists()
        assert app.backups.last_backup is not None

    def test_backup_requires_session(self, app: PropfolioApp) -> None:
        with pytest.raises(PersistenceError):
            app.backup_now()

    def test_close_unsubscribes(
        self, app: PropfolioApp, provider: InMemoryIdentityProvider, sample_user: User
    ) -> None:
        app.close()

        provider.emit(sample_user)

        assert provider.listener_count == 0
        assert app.store is None
