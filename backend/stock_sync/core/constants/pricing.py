"""
Pricing constants — tax fallback keys and currency-code equivalences.

Every pricing rule lives here. When a tax or currency rule changes, update ONE file.
Version: 1.0.0
"""

# Fallback tax: the general rate of the value-added-tax family
VAT_TAX_FAMILY: str = "IVA"
GENERAL_TAX_CODE: str = "general"

# The bolivar has been re-denominated twice; all three ISO codes mean the same
# currency for rate lookups.
CANONICAL_BOLIVAR: str = "VES"
CURRENCY_ALIASES: dict[str, str] = {
    "VEF": CANONICAL_BOLIVAR,
    "VED": CANONICAL_BOLIVAR,
    "VES": CANONICAL_BOLIVAR,
}

# Reference currency the remote rate table is expressed against
REFERENCE_CURRENCY: str = "USD"

# Intermediate base-currency rounding, then final rounding
BASE_PRICE_DECIMALS: int = 2
FINAL_PRICE_DECIMALS: int = 4
