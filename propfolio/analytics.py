"""Portfolio analytics: completion, compliance, occupancy and cash flow."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable

from propfolio.models import CertificateStatus, Property, TransactionKind

# Tenants with this name are placeholders for a vacant room
VACANT_TENANT_NAME = "Empty"

EXPIRY_WARNING_DAYS = 90


class ComplianceStatus(str, Enum):
    COMPLIANT = "Compliant"
    INCOMPLETE = "Incomplete"
    UNKNOWN = "Unknown"
    ATTENTION = "Attention"


class ExpiryStatus(str, Enum):
    ACTIVE = "Active"
    EXPIRING_SOON = "Expiring Soon"
    EXPIRED = "Expired"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class OccupancyStats:
    total_units: int
    rented: int

    @property
    def unoccupied(self) -> int:
        return max(0, self.total_units - self.rented)

    @property
    def occupancy_rate(self) -> int:
        """Whole-number percentage of rented units."""
        if self.total_units <= 0:
            return 0
        return _round_half_up(Decimal(self.rented * 100) / self.total_units)


@dataclass(frozen=True)
class PeriodTotals:
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def profit(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class FinancialSummary:
    month: PeriodTotals
    year: PeriodTotals


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def completion_score(prop: Property) -> int:
    """Percentage of the seven record-keeping checks a property satisfies."""
    checks = [
        any(not t.is_deleted for t in prop.tenants),
        prop.mortgage is not None,
        prop.buildings_insurance is not None,
        bool(prop.utilities),
        prop.gas_certificate is not None,
        prop.eicr_certificate is not None,
        bool(prop.documents),
    ]
    return _round_half_up(Decimal(sum(checks) * 100) / len(checks))


def compliance_status(prop: Property, today: date | None = None) -> ComplianceStatus:
    """Summarise the gas safety, EICR and EPC certificates of a property.

    Any expired certificate needs attention, even when others are missing.
    """
    today = today or date.today()
    certificates = [prop.gas_certificate, prop.eicr_certificate, prop.epc_certificate]
    missing = 0
    for cert in certificates:
        if cert is None:
            missing += 1
        elif cert.status == CertificateStatus.EXPIRED or (
            cert.expiry_date is not None and cert.expiry_date < today
        ):
            return ComplianceStatus.ATTENTION

    if missing == len(certificates):
        return ComplianceStatus.UNKNOWN
    if missing:
        return ComplianceStatus.INCOMPLETE
    return ComplianceStatus.COMPLIANT


def expiry_status(expiry: date | None, today: date | None = None) -> ExpiryStatus:
    """Classify a renewal or expiry date relative to ``today``."""
    if expiry is None:
        return ExpiryStatus.UNKNOWN
    days = (expiry - (today or date.today())).days
    if days < 0:
        return ExpiryStatus.EXPIRED
    if days < EXPIRY_WARNING_DAYS:
        return ExpiryStatus.EXPIRING_SOON
    return ExpiryStatus.ACTIVE


def occupancy_stats(properties: Iterable[Property]) -> OccupancyStats:
    """Count lettable units and rented units across ``properties``.

    A property without a declared capacity counts one unit per live tenant
    record, and at least one unit.
    """
    total_units = 0
    rented = 0
    for prop in properties:
        live = [t for t in prop.tenants if not t.is_deleted and not t.is_archived]
        total_units += prop.capacity or max(len(live), 1)
        rented += sum(1 for t in live if t.name != VACANT_TENANT_NAME and t.rent_amount > 0)
    return OccupancyStats(total_units=total_units, rented=rented)


def financial_summary(
    properties: Iterable[Property],
    today: date | None = None,
) -> FinancialSummary:
    """Income and expense totals for the current month and calendar year."""
    today = today or date.today()
    totals = {
        "month": {TransactionKind.INCOME: Decimal("0"), TransactionKind.EXPENSE: Decimal("0")},
        "year": {TransactionKind.INCOME: Decimal("0"), TransactionKind.EXPENSE: Decimal("0")},
    }
    for prop in properties:
        for tx in prop.transactions:
            if tx.date.year != today.year:
                continue
            totals["year"][tx.kind] += tx.amount
            if tx.date.month == today.month:
                totals["month"][tx.kind] += tx.amount

    return FinancialSummary(
        month=PeriodTotals(
            income=totals["month"][TransactionKind.INCOME],
            expense=totals["month"][TransactionKind.EXPENSE],
        ),
        year=PeriodTotals(
            income=totals["year"][TransactionKind.INCOME],
            expense=totals["year"][TransactionKind.EXPENSE],
        ),
    )


def format_currency(amount: Decimal | int | float) -> str:
    """Format an amount as whole pounds, e.g. ``£1,250`` or ``-£300``."""
    pounds = _round_half_up(abs(Decimal(str(amount))))
    sign = "-" if Decimal(str(amount)) < 0 and pounds else ""
    return f"{sign}£{pounds:,}"
