"""Domain models for portfolio management."""

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
from propfolio.models.property import (
    CHILD_COLLECTIONS,
    DEFAULT_IMAGE_URL,
    BuildingsInsurance,
    ComplianceCertificate,
    Document,
    FinancialTransaction,
    MaintenanceTicket,
    Mortgage,
    Payment,
    ProductInsurance,
    Property,
    PropertyDraft,
    Tenant,
    UtilityProvider,
    apply_patch,
    build_property,
    merge_fields,
    validate_patch,
)
from propfolio.models.session import Session, SessionStatus, User

__all__ = [
    "CHILD_COLLECTIONS",
    "DEFAULT_IMAGE_URL",
    "BuildingsInsurance",
    "CertificateStatus",
    "ComplianceCertificate",
    "Document",
    "FinancialTransaction",
    "MaintenanceTicket",
    "Mortgage",
    "Payment",
    "PaymentType",
    "ProductInsurance",
    "Property",
    "PropertyDraft",
    "PropertyStatus",
    "PropertyType",
    "Session",
    "SessionStatus",
    "Tenant",
    "TicketPriority",
    "TicketStatus",
    "TransactionKind",
    "User",
    "UtilityKind",
    "UtilityProvider",
    "apply_patch",
    "build_property",
    "merge_fields",
    "validate_patch",
]
