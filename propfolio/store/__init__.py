"""Portfolio entity store."""

from propfolio.store.portfolio import (
    PortfolioStore,
    PurgedIds,
    ReconciliationLatch,
    ReconciliationReport,
)
from propfolio.store.seed import AUTHORITATIVE_PORTFOLIO, PLACEHOLDER_ADDRESSES, is_placeholder

__all__ = [
    "AUTHORITATIVE_PORTFOLIO",
    "PLACEHOLDER_ADDRESSES",
    "PortfolioStore",
    "PurgedIds",
    "ReconciliationLatch",
    "ReconciliationReport",
    "is_placeholder",
]
