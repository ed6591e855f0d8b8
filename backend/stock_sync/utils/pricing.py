"""
Pricing helpers — tax-rate resolution and final price computation.

Pure functions, no I/O. The price of a remote item is:

    base   = round(amount converted into the base currency, 2)
    taxed  = base * (1 + tax_rate / 100)
    final  = round(taxed converted into the target currency, 4)

Exchange rates are all expressed against one reference currency, so a
conversion from A to B is ``amount * rates[B] / rates[A]``. A missing rate
makes the item unpriceable (None) rather than guessing.
Version: 1.0.0
"""
import logging
from typing import Iterable, Mapping, Optional

from stock_sync.core.constants.pricing import (
    BASE_PRICE_DECIMALS,
    CURRENCY_ALIASES,
    FINAL_PRICE_DECIMALS,
    GENERAL_TAX_CODE,
    VAT_TAX_FAMILY,
)
from stock_sync.schemas.sync import TaxRate

logger = logging.getLogger("pricing")


def normalize_currency_code(code: Optional[str]) -> str:
    """Upper-case an ISO code and fold the bolivar variants into one code."""
    normalized = (code or "").strip().upper()
    return CURRENCY_ALIASES.get(normalized, normalized)


def normalize_rate_table(rates: Mapping[str, float]) -> dict[str, float]:
    """Re-key a rate table by normalized currency code."""
    table: dict[str, float] = {}
    for code, rate in (rates or {}).items():
        try:
            table[normalize_currency_code(code)] = float(rate)
        except (TypeError, ValueError):
            logger.debug("ignoring non-numeric rate currency=%s rate=%r", code, rate)
    return table


def convert_amount(
    amount: float, from_currency: str, to_currency: str, rates: Mapping[str, float],
) -> Optional[float]:
    """Convert between two currencies; None when a rate is missing or zero."""
    source = normalize_currency_code(from_currency)
    target = normalize_currency_code(to_currency)
    if source == target:
        return amount
    table = normalize_rate_table(rates)
    source_rate = table.get(source)
    target_rate = table.get(target)
    if not source_rate or target_rate is None:
        return None
    return amount * target_rate / source_rate


def resolve_tax_rate(
    table: Iterable[TaxRate],
    item_tax_id: Optional[str],
    store_default_tax_id: Optional[str],
) -> float:
    """
    Resolve the tax percentage for an item.

    First match wins:
    1. the item's own tax id
    2. the store's default tax id
    3. the general rate of the VAT family (code compared case-insensitively)
    4. 0 (no tax)
    """
    taxes = list(table or [])
    by_id = {tax.id: tax for tax in taxes}

    if item_tax_id and item_tax_id in by_id:
        return max(0.0, float(by_id[item_tax_id].rate))

    if store_default_tax_id and store_default_tax_id in by_id:
        return max(0.0, float(by_id[store_default_tax_id].rate))

    for tax in taxes:
        if tax.family == VAT_TAX_FAMILY and (tax.code or "").lower() == GENERAL_TAX_CODE.lower():
            return max(0.0, float(tax.rate))

    return 0.0


def compute_final_price(
    amount: float,
    source_currency: str,
    tax_rate_percent: float,
    rates: Mapping[str, float],
    base_currency: str,
    target_currency: str,
) -> Optional[float]:
    """Compute the local price of a remote retail amount, or None if it cannot be priced."""
    base_amount = convert_amount(amount, source_currency, base_currency, rates)
    if base_amount is None:
        logger.info(
            "missing exchange rate source=%s base=%s", source_currency, base_currency
        )
        return None

    base_amount = round(base_amount, BASE_PRICE_DECIMALS)
    taxed = base_amount * (1 + tax_rate_percent / 100)

    final = convert_amount(taxed, base_currency, target_currency, rates)
    if final is None:
        logger.info(
            "missing exchange rate base=%s target=%s", base_currency, target_currency
        )
        return None

    return round(final, FINAL_PRICE_DECIMALS)
