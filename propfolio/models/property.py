"""Property model and its child records."""

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from propfolio.exceptions import InvalidPatchError
from propfolio.models.enums import (
    CertificateStatus,
    PaymentType,
    PropertyStatus,
    PropertyType,
    TicketPriority,
    TicketStatus,
    TransactionKind,
    UtilityKind,
)

DEFAULT_IMAGE_URL = "https://picsum.photos/800/600"

# Fields only the store's lifecycle operations may change
PROTECTED_FIELDS = frozenset({"id", "status", "user_id", "deleted_at"})


@dataclass
class UtilityProvider:
    """Utility supplier account attached to a property."""

    kind: UtilityKind
    provider_name: str
    account_number: str = ""


@dataclass
class ProductInsurance:
    """Appliance or product cover (boiler care, white goods)."""

    id: str
    item_name: str
    provider: str = ""
    renewal_date: date | None = None
    premium: Decimal = Decimal("0")


@dataclass
class Payment:
    id: str
    date: date
    amount: Decimal
    payment_type: PaymentType = PaymentType.RENT  # CHARGE increases the balance
    reference: str = ""
    notes: str = ""


@dataclass
class Document:
    id: str
    name: str
    doc_type: str = "PDF"
    upload_date: date | None = None
    url: str | None = None
    category: str = "Other"
    expiry_date: date | None = None
    summary: str = ""


@dataclass
class Tenant:
    """Tenant occupying a property or, for an HMO, one of its rooms."""

    id: str
    name: str
    rent_amount: Decimal = Decimal("0")
    deposit_amount: Decimal = Decimal("0")
    deposit_reference: str = ""
    tenancy_start: date | None = None
    tenancy_end: date | None = None
    right_to_rent_expiry: date | None = None
    outstanding_balance: Decimal = Decimal("0")
    room_id: str | None = None
    is_archived: bool = False
    is_deleted: bool = False
    payments: list[Payment] = field(default_factory=list)
    documents: list[Document] = field(default_factory=list)


@dataclass
class FinancialTransaction:
    id: str
    date: date
    kind: TransactionKind
    category: str
    amount: Decimal
    description: str = ""


@dataclass
class MaintenanceTicket:
    id: str
    title: str
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.MEDIUM
    description: str = ""
    reported_at: date | None = None
    cost: Decimal = Decimal("0")


@dataclass
class Mortgage:
    lender_name: str
    term_years: int
    monthly_payment: Decimal
    interest_rate: float
    fixed_rate_expiry: date | None = None
    mortgage_type: str = "Fixed"


@dataclass
class BuildingsInsurance:
    provider: str
    premium: Decimal
    policy_number: str = ""
    renewal_date: date | None = None


@dataclass
class ComplianceCertificate:
    """Gas safety, EICR or EPC certificate."""

    expiry_date: date | None = None
    status: CertificateStatus = CertificateStatus.VALID


@dataclass
class Property:
    """Real estate asset managed in a portfolio."""

    id: str
    address: str
    postcode: str
    property_type: PropertyType
    valuation: Decimal
    purchase_date: date
    image_url: str = DEFAULT_IMAGE_URL
    status: PropertyStatus = PropertyStatus.ACTIVE
    user_id: str | None = None  # Scope (owning user) the record belongs to
    owner: str = ""
    description: str = ""
    capacity: int | None = None  # Lettable units; HMO rooms
    mortgage: Mortgage | None = None
    buildings_insurance: BuildingsInsurance | None = None
    gas_certificate: ComplianceCertificate | None = None
    eicr_certificate: ComplianceCertificate | None = None
    epc_certificate: ComplianceCertificate | None = None
    utilities: list[UtilityProvider] = field(default_factory=list)
    insurances: list[ProductInsurance] = field(default_factory=list)
    tenants: list[Tenant] = field(default_factory=list)
    documents: list[Document] = field(default_factory=list)
    transactions: list[FinancialTransaction] = field(default_factory=list)
    maintenance_tickets: list[MaintenanceTicket] = field(default_factory=list)
    deleted_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == PropertyStatus.ACTIVE

    @property
    def is_trashed(self) -> bool:
        return self.status == PropertyStatus.TRASHED


CHILD_COLLECTIONS = (
    "utilities",
    "insurances",
    "tenants",
    "documents",
    "transactions",
    "maintenance_tickets",
)

ALL_FIELDS = frozenset(f.name for f in dataclasses.fields(Property))
PATCHABLE_FIELDS = ALL_FIELDS - PROTECTED_FIELDS


@dataclass
class PropertyDraft:
    """User-supplied fields of a property that has not been stored yet."""

    address: str
    postcode: str = ""
    property_type: PropertyType = PropertyType.FLAT
    valuation: Decimal = Decimal("0")
    purchase_date: date | None = None  # Defaults to the day it is added
    image_url: str = DEFAULT_IMAGE_URL
    owner: str = ""
    description: str = ""
    capacity: int | None = None

    def __post_init__(self) -> None:
        if not self.address or not self.address.strip():
            raise InvalidPatchError("A property needs an address")
        self.property_type = _coerce("property_type", self.property_type)
        self.valuation = _coerce("valuation", self.valuation)
        if self.purchase_date is not None:
            self.purchase_date = _coerce("purchase_date", self.purchase_date)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PropertyDraft":
        """Build a draft from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidPatchError(f"Unknown draft fields: {', '.join(sorted(unknown))}")
        return cls(**dict(data))


def build_property(draft: PropertyDraft, property_id: str, user_id: str | None = None) -> Property:
    """Materialise a draft as an active property with empty child collections."""
    return Property(
        id=property_id,
        address=draft.address.strip(),
        postcode=draft.postcode.strip(),
        property_type=draft.property_type,
        valuation=draft.valuation,
        purchase_date=draft.purchase_date or date.today(),
        image_url=draft.image_url or DEFAULT_IMAGE_URL,
        status=PropertyStatus.ACTIVE,
        user_id=user_id,
        owner=draft.owner,
        description=draft.description,
        capacity=draft.capacity,
    )


def validate_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Check patch field names and coerce scalar values.

    Returns
    -------
    dict[str, Any]
        The coerced patch.
    """
    blocked = set(patch) & PROTECTED_FIELDS
    if blocked:
        raise InvalidPatchError(f"Fields cannot be patched: {', '.join(sorted(blocked))}")
    unknown = set(patch) - PATCHABLE_FIELDS
    if unknown:
        raise InvalidPatchError(f"Unknown property fields: {', '.join(sorted(unknown))}")
    return {name: _coerce(name, value) for name, value in patch.items()}


def apply_patch(prop: Property, patch: Mapping[str, Any]) -> Property:
    """Return a copy of ``prop`` with a user patch merged in."""
    return dataclasses.replace(prop, **validate_patch(patch))


def merge_fields(prop: Property, changes: Mapping[str, Any]) -> Property:
    """Return a copy of ``prop`` with ``changes`` merged in.

    Unlike :func:`apply_patch` this accepts lifecycle fields; backends use
    it to mirror whatever the store already applied.
    """
    unknown = set(changes) - ALL_FIELDS
    if unknown:
        raise InvalidPatchError(f"Unknown property fields: {', '.join(sorted(unknown))}")
    return dataclasses.replace(
        prop, **{name: _coerce(name, value) for name, value in changes.items()}
    )


def _coerce(name: str, value: Any) -> Any:
    try:
        if name == "valuation" and not isinstance(value, Decimal):
            return Decimal(str(value))
        if name == "property_type" and not isinstance(value, PropertyType):
            return PropertyType(value)
        if name == "purchase_date" and isinstance(value, str):
            return date.fromisoformat(value)
    except (InvalidOperation, ValueError) as e:
        raise InvalidPatchError(f"Invalid value for {name}: {value!r}") from e
    return value
