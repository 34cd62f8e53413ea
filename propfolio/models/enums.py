"""Enumeration types for portfolio entities."""

from enum import Enum


class PropertyType(str, Enum):
    FLAT = "FLAT"
    HOUSE = "HOUSE"
    HMO = "HMO"
    BUNGALOW = "BUNGALOW"
    COMMERCIAL = "COMMERCIAL"


class PropertyStatus(str, Enum):
    """Lifecycle state of a stored property.

    Permanently deleted properties leave the store, so there is no member
    for that terminal state.
    """

    ACTIVE = "ACTIVE"
    TRASHED = "TRASHED"


class UtilityKind(str, Enum):
    GAS = "GAS"
    ELECTRIC = "ELECTRIC"
    WATER = "WATER"
    INTERNET = "INTERNET"


class CertificateStatus(str, Enum):
    VALID = "VALID"
    EXPIRED = "EXPIRED"
    PENDING = "PENDING"


class PaymentType(str, Enum):
    RENT = "RENT"
    DEPOSIT = "DEPOSIT"
    CHARGE = "CHARGE"
    ADJUSTMENT = "ADJUSTMENT"


class TransactionKind(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TicketStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"


class TicketPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"
