"""
Unit tests for the pricing helpers.

Tests cover:
- currency code normalization and the bolivar alias family
- cross-rate conversion and missing-rate handling
- tax-rate resolution fallback order
- final price computation (base rounding, tax, target conversion)

Version: 1.0.0
"""
import pytest

from stock_sync.schemas.sync import TaxRate
from stock_sync.utils.pricing import (
    compute_final_price,
    convert_amount,
    normalize_currency_code,
    normalize_rate_table,
    resolve_tax_rate,
)


pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# normalize_currency_code
# ---------------------------------------------------------------------------

class TestNormalizeCurrencyCode:

    @pytest.mark.parametrize("code", ["VEF", "VED", "VES", "ves", " Ved "])
    def test_bolivar_variants_fold_to_one_code(self, code):
        assert normalize_currency_code(code) == "VES"

    def test_other_codes_upper_cased(self):
        assert normalize_currency_code("eur") == "EUR"

    def test_none_is_empty(self):
        assert normalize_currency_code(None) == ""

    def test_rate_table_rekeyed_and_non_numeric_dropped(self):
        table = normalize_rate_table({"vef": "36.5", "USD": 1, "XXX": "n/a"})
        assert table == {"VES": 36.5, "USD": 1.0}


# ---------------------------------------------------------------------------
# convert_amount
# ---------------------------------------------------------------------------

class TestConvertAmount:

    def test_same_currency_is_identity(self):
        assert convert_amount(12.5, "EUR", "eur", {}) == 12.5

    def test_cross_rate_conversion(self):
        rates = {"USD": 1.0, "EUR": 0.5}
        assert convert_amount(10.0, "EUR", "USD", rates) == pytest.approx(20.0)

    def test_alias_resolves_rate(self):
        rates = {"USD": 1.0, "VES": 40.0}
        assert convert_amount(80.0, "VEF", "USD", rates) == pytest.approx(2.0)

    def test_missing_source_rate_is_none(self):
        assert convert_amount(10.0, "EUR", "USD", {"USD": 1.0}) is None

    def test_missing_target_rate_is_none(self):
        assert convert_amount(10.0, "USD", "EUR", {"USD": 1.0}) is None

    def test_zero_source_rate_is_none(self):
        assert convert_amount(10.0, "EUR", "USD", {"USD": 1.0, "EUR": 0}) is None


# ---------------------------------------------------------------------------
# resolve_tax_rate
# ---------------------------------------------------------------------------

class TestResolveTaxRate:

    def test_item_tax_wins(self, tax_table):
        assert resolve_tax_rate(tax_table, "tax-reduced", "tax-exempt") == 8

    def test_store_default_when_item_tax_unknown(self, tax_table):
        assert resolve_tax_rate(tax_table, "tax-missing", "tax-exempt") == 0

    def test_store_default_when_item_tax_empty(self, tax_table):
        assert resolve_tax_rate(tax_table, "", "tax-reduced") == 8

    def test_general_vat_rate_matched_case_insensitively(self, tax_table):
        assert resolve_tax_rate(tax_table, None, None) == 16

    def test_general_code_outside_vat_family_ignored(self):
        table = [TaxRate.model_validate({"uuid": "t1", "type": "ISLR", "code": "general", "percentage": 3})]
        assert resolve_tax_rate(table, None, None) == 0

    def test_empty_table_is_zero(self):
        assert resolve_tax_rate([], "tax-general", "tax-general") == 0

    def test_negative_rate_clamped(self):
        table = [TaxRate.model_validate({"uuid": "t1", "type": "IVA", "code": "x", "percentage": -5})]
        assert resolve_tax_rate(table, "t1", None) == 0


# ---------------------------------------------------------------------------
# compute_final_price
# ---------------------------------------------------------------------------

class TestComputeFinalPrice:

    def test_tax_applied_in_base_currency(self):
        result = compute_final_price(10.0, "USD", 16, {"USD": 1.0}, "USD", "USD")
        assert result == pytest.approx(11.6)

    def test_source_to_base_to_target(self):
        rates = {"USD": 1.0, "EUR": 0.5, "VES": 36.5}
        result = compute_final_price(10.0, "EUR", 16, rates, "USD", "VES")
        assert result == pytest.approx(846.8)

    def test_base_amount_rounded_to_two_decimals_before_tax(self):
        rates = {"USD": 1.0, "EUR": 0.3}
        # 10 / 0.3 = 33.333... -> 33.33 before any further step
        result = compute_final_price(10.0, "EUR", 0, rates, "USD", "USD")
        assert result == pytest.approx(33.33)

    def test_final_rounded_to_four_decimals(self):
        rates = {"USD": 1.0, "VES": 36.123456}
        result = compute_final_price(1.0, "USD", 0, rates, "USD", "VES")
        assert result == 36.1235

    @pytest.mark.parametrize("amount", [0.0, 1.0, 19.99, 1234.56])
    def test_identity_rates_return_amount(self, amount):
        rates = {"USD": 1.0, "EUR": 0.9}
        assert compute_final_price(amount, "EUR", 0, rates, "EUR", "EUR") == round(amount, 4)

    def test_missing_source_rate_returns_none(self):
        assert compute_final_price(10.0, "EUR", 16, {"USD": 1.0}, "USD", "USD") is None

    def test_missing_target_rate_returns_none(self):
        assert compute_final_price(10.0, "USD", 16, {"USD": 1.0}, "USD", "COP") is None

    def test_bolivar_alias_in_target(self):
        rates = {"USD": 1.0, "VES": 40.0}
        assert compute_final_price(10.0, "USD", 0, rates, "USD", "VEF") == pytest.approx(400.0)
