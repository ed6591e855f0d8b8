"""
Constants package — re-exports from domain-specific modules.

Centralized business constants for the stock sync service.

Usage:
    from stock_sync.core.constants.sync import DEFAULT_BATCH_SIZE
    from stock_sync.core.constants.pricing import VAT_TAX_FAMILY
    # or import everything:
    from stock_sync.core.constants import pricing, sync
Version: 1.0.0
"""

from stock_sync.core.constants import pricing, sync
from stock_sync.core.constants.pricing import (
    CANONICAL_BOLIVAR,
    CURRENCY_ALIASES,
    GENERAL_TAX_CODE,
    REFERENCE_CURRENCY,
    VAT_TAX_FAMILY,
)
from stock_sync.core.constants.sync import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_DRAIN_INTERVAL_SECONDS,
    DEFAULT_FULL_RUN_MINUTES,
    LOCAL_TOKEN_PREFIX,
    MIN_FULL_RUN_MINUTES,
    MIN_PRICE,
    STATUS_COMPLETED,
    STATUS_ERROR,
    STATUS_PENDING,
    STATUS_PROCESSING,
)

__all__ = [
    "pricing",
    "sync",
    "CANONICAL_BOLIVAR",
    "CURRENCY_ALIASES",
    "GENERAL_TAX_CODE",
    "REFERENCE_CURRENCY",
    "VAT_TAX_FAMILY",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_DRAIN_INTERVAL_SECONDS",
    "DEFAULT_FULL_RUN_MINUTES",
    "LOCAL_TOKEN_PREFIX",
    "MIN_FULL_RUN_MINUTES",
    "MIN_PRICE",
    "STATUS_COMPLETED",
    "STATUS_ERROR",
    "STATUS_PENDING",
    "STATUS_PROCESSING",
]
