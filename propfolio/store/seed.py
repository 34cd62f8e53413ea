"""Placeholder signatures and the authoritative replacement portfolio.

Early builds seeded every new account with demonstration properties. The
reconciliation pass in :mod:`propfolio.store.portfolio` recognises those
records by their address or id prefix and swaps them for the records below.
"""

import re
from decimal import Decimal

from propfolio.models import Property, PropertyDraft, PropertyType

DEFAULT_PLACEHOLDER_PREFIX = "demo-"

# Addresses shipped with the demonstration data
PLACEHOLDER_ADDRESSES = (
    "12 Oak Avenue, Manchester",
    "45b High Street, Leeds",
)

_PLACEHOLDER_PATTERN = re.compile(
    "|".join(re.escape(a.lower()) for a in PLACEHOLDER_ADDRESSES)
)

AUTHORITATIVE_PORTFOLIO: tuple[PropertyDraft, ...] = (
    PropertyDraft(
        address="27 Wilmslow Road, Manchester",
        postcode="M14 5TB",
        property_type=PropertyType.HMO,
        valuation=Decimal("395000"),
        owner="J. Smith Holdings Ltd",
        capacity=6,
    ),
    PropertyDraft(
        address="Flat 3, 88 Headingley Lane, Leeds",
        postcode="LS6 1BN",
        property_type=PropertyType.FLAT,
        valuation=Decimal("185000"),
        owner="Private Portfolio",
        capacity=1,
    ),
    PropertyDraft(
        address="9 Clifton Terrace, Bristol",
        postcode="BS8 4AW",
        property_type=PropertyType.HOUSE,
        valuation=Decimal("540000"),
        owner="Private Portfolio",
        capacity=1,
    ),
)


def _normalise(address: str) -> str:
    return " ".join(address.lower().split())


def is_placeholder(prop: Property, prefix: str = DEFAULT_PLACEHOLDER_PREFIX) -> bool:
    """Tell whether ``prop`` carries the demonstration-data signature."""
    if prefix and prop.id.startswith(prefix):
        return True
    return _PLACEHOLDER_PATTERN.fullmatch(_normalise(prop.address)) is not None
