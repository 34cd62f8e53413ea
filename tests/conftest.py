"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Mapping

import pytest

from propfolio.exceptions import PersistenceError
from propfolio.models import Property, PropertyDraft, PropertyType, User
from propfolio.persistence import InMemoryBackend, InMemoryLocalStorage
from propfolio.store import PortfolioStore, ReconciliationLatch


class FlakyBackend(InMemoryBackend):
    """In-memory backend that records calls and fails on demand."""

    def __init__(self, records: list[Property] | None = None) -> None:
        super().__init__(records)
        self.calls: list[tuple[str, str]] = []
        self.fail_create_after: int | None = None
        self.fail_update = False
        self.fail_delete_ids: set[str] = set()
        self._creates = 0

    @property
    def mutations(self) -> list[tuple[str, str]]:
        return [c for c in self.calls if c[0] != "list_all"]

    def list_all(self, scope: str) -> list[Property]:
        self.calls.append(("list_all", scope))
        return super().list_all(scope)

    def create(self, entity: Property) -> Property:
        self.calls.append(("create", entity.id))
        if self.fail_create_after is not None and self._creates >= self.fail_create_after:
            raise PersistenceError(f"create of {entity.id} rejected")
        self._creates += 1
        return super().create(entity)

    def update(self, entity_id: str, patch: Mapping[str, Any]) -> Property:
        self.calls.append(("update", entity_id))
        if self.fail_update:
            raise PersistenceError(f"update of {entity_id} rejected")
        return super().update(entity_id, patch)

    def delete(self, entity_id: str) -> None:
        self.calls.append(("delete", entity_id))
        if entity_id in self.fail_delete_ids:
            raise PersistenceError(f"delete of {entity_id} rejected")
        super().delete(entity_id)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def scope() -> str:
    """Sample user id owning the portfolio."""
    return "user-test-001"


@pytest.fixture
def sample_user(scope: str) -> User:
    """Sample signed-in user."""
    return User(uid=scope, display_name="Test Landlord", email="landlord@test.com")


@pytest.fixture
def make_property(scope: str) -> Callable[..., Property]:
    """Factory for stored properties owned by the sample scope."""

    def factory(entity_id: str, address: str = "1 Test Road, York", **kwargs: Any) -> Property:
        fields: dict[str, Any] = {
            "postcode": "YO1 7HH",
            "property_type": PropertyType.HOUSE,
            "valuation": Decimal("250000"),
            "purchase_date": date(2019, 6, 1),
            "user_id": scope,
        }
        fields.update(kwargs)
        return Property(id=entity_id, address=address, **fields)

    return factory


@pytest.fixture
def sample_draft() -> PropertyDraft:
    """Sample property draft."""
    return PropertyDraft(
        address="14 Canal Street, Nottingham",
        postcode="NG1 7EH",
        property_type=PropertyType.FLAT,
        valuation=Decimal("165000"),
        purchase_date=date(2021, 3, 15),
        owner="Test Landlord",
    )


@pytest.fixture
def backend() -> FlakyBackend:
    """Fresh recording backend."""
    return FlakyBackend()


@pytest.fixture
def latch() -> ReconciliationLatch:
    """Session reconciliation latch."""
    return ReconciliationLatch()


@pytest.fixture
def store(backend: FlakyBackend, scope: str, latch: ReconciliationLatch) -> PortfolioStore:
    """Loaded store over an empty backend."""
    portfolio = PortfolioStore(backend, scope, latch=latch)
    portfolio.load()
    return portfolio


@pytest.fixture
def local_storage() -> InMemoryLocalStorage:
    """Empty durable key/value storage."""
    return InMemoryLocalStorage()
