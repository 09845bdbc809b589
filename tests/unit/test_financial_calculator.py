"""
Unit Tests for the import financial calculator.

These tests verify:
1. Down payment, financed amount, admin fee and total cost derivation
2. Installment division and remainder allocation
3. Input validation for values, rates and terms
4. Terms parsing from lists and comma-separated strings
"""

from decimal import Decimal

import pytest

from src.domain.exceptions import FinancialValidationException
from src.service.financial import calculate_financials, parse_terms


# =============================================================================
# Breakdown Tests
# =============================================================================

class TestCalculateFinancials:
    """Tests for calculate_financials()."""

    def test_reference_breakdown(self):
        """100,000 cents at 30% down and 10% fee over three terms."""
        breakdown = calculate_financials(100000, 30, 10, [30, 60, 90])

        assert breakdown.down_payment_cents == 30000
        assert breakdown.financed_amount_cents == 70000
        assert breakdown.admin_fee_cents == 7000
        assert breakdown.total_cost_cents == 107000
        assert breakdown.installment_cents == 23333
        assert breakdown.installment_remainder_cents == 1
        assert breakdown.installment_count == 3

    def test_admin_fee_only_on_financed_amount(self):
        """The fee never applies to the down payment."""
        breakdown = calculate_financials(200000, 50, 10, [30])

        assert breakdown.financed_amount_cents == 100000
        assert breakdown.admin_fee_cents == 10000
        assert breakdown.total_cost_cents == 210000

    def test_full_down_payment_finances_nothing(self):
        """A 100% down payment leaves nothing financed and no fee."""
        breakdown = calculate_financials(100000, 100, 10, [30, 60])

        assert breakdown.down_payment_cents == 100000
        assert breakdown.financed_amount_cents == 0
        assert breakdown.admin_fee_cents == 0
        assert breakdown.installment_cents == 0
        assert breakdown.installment_amounts() == [0, 0]

    def test_zero_down_payment_finances_everything(self):
        breakdown = calculate_financials(100000, 0, 0, [30])

        assert breakdown.down_payment_cents == 0
        assert breakdown.financed_amount_cents == 100000
        assert breakdown.total_cost_cents == 100000
        assert breakdown.installment_amounts() == [100000]

    def test_single_term_takes_whole_financed_amount(self):
        breakdown = calculate_financials(99999, 30, 10, [45])

        assert breakdown.installment_amounts() == [breakdown.financed_amount_cents]

    def test_decimal_and_string_rates(self):
        """Rates may be given as Decimal, str or int with the same result."""
        as_int = calculate_financials(123457, 25, 3, [30, 60])
        as_str = calculate_financials(123457, "25", "3", [30, 60])
        as_decimal = calculate_financials(123457, Decimal("25.00"), Decimal("3"), [30, 60])

        assert as_int.down_payment_cents == as_str.down_payment_cents == as_decimal.down_payment_cents
        assert as_int.admin_fee_cents == as_str.admin_fee_cents == as_decimal.admin_fee_cents

    def test_fractional_rates_round_half_up(self):
        """12.5% of 1,001 cents is 125.125 -> 125; 0.5 cent rounds up."""
        breakdown = calculate_financials(1001, "12.5", "0", [30])
        assert breakdown.down_payment_cents == 125

        breakdown = calculate_financials(101, "50", "0", [30])
        # 50.5 rounds half up to 51
        assert breakdown.down_payment_cents == 51
        assert breakdown.financed_amount_cents == 50


# =============================================================================
# Installment Allocation Tests
# =============================================================================

class TestInstallmentAmounts:
    """Tests for FinancialBreakdown.installment_amounts()."""

    def test_remainder_on_first_installment(self):
        breakdown = calculate_financials(100000, 30, 10, [30, 60, 90])

        assert breakdown.installment_amounts() == [23334, 23333, 23333]

    def test_even_division_has_no_remainder(self):
        breakdown = calculate_financials(100000, 40, 10, [30, 60, 90, 120])

        assert breakdown.installment_remainder_cents == 0
        assert breakdown.installment_amounts() == [15000, 15000, 15000, 15000]

    @pytest.mark.parametrize(
        "fob_value_cents,down_payment_rate,admin_fee_rate,terms",
        [
            (100000, 30, 10, [30, 60, 90]),
            (1, 0, 0, [30, 60, 90]),
            (7, 0, 5, [10, 20, 30, 40, 50, 60]),
            (9999999, "33.33", "2.75", [30, 60, 90, 120, 150]),
            (123456789, "17.5", "9.99", [15, 45]),
            (500, 99, 100, [30, 60, 90]),
        ],
    )
    def test_amounts_reconcile(self, fob_value_cents, down_payment_rate, admin_fee_rate, terms):
        """down + financed == fob, total == fob + fee, installments sum to financed."""
        breakdown = calculate_financials(fob_value_cents, down_payment_rate, admin_fee_rate, terms)
        amounts = breakdown.installment_amounts()

        assert breakdown.down_payment_cents + breakdown.financed_amount_cents == fob_value_cents
        assert breakdown.total_cost_cents == fob_value_cents + breakdown.admin_fee_cents
        assert sum(amounts) == breakdown.financed_amount_cents
        assert len(amounts) == len(terms)
        assert all(amount >= 0 for amount in amounts)
        assert 0 <= breakdown.installment_remainder_cents < len(terms)


# =============================================================================
# Validation Tests
# =============================================================================

class TestValidation:
    """Tests for calculator input validation."""

    @pytest.mark.parametrize("fob_value_cents", [0, -1, -100000])
    def test_non_positive_fob_rejected(self, fob_value_cents):
        with pytest.raises(FinancialValidationException) as exc_info:
            calculate_financials(fob_value_cents, 30, 10, [30])

        assert exc_info.value.field == "fob_value_cents"

    @pytest.mark.parametrize("fob_value_cents", [100.5, "100000", True])
    def test_non_integer_fob_rejected(self, fob_value_cents):
        with pytest.raises(FinancialValidationException):
            calculate_financials(fob_value_cents, 30, 10, [30])

    @pytest.mark.parametrize("rate", [-1, "100.01", 101, "abc", "NaN", "Infinity"])
    def test_down_payment_rate_out_of_range(self, rate):
        with pytest.raises(FinancialValidationException) as exc_info:
            calculate_financials(100000, rate, 10, [30])

        assert exc_info.value.field == "down_payment_rate"

    @pytest.mark.parametrize("rate", [-0.01, 150])
    def test_admin_fee_rate_out_of_range(self, rate):
        with pytest.raises(FinancialValidationException) as exc_info:
            calculate_financials(100000, 30, rate, [30])

        assert exc_info.value.field == "admin_fee_rate"

    @pytest.mark.parametrize("terms", [[], [0], [30, -60], [30, "60"], [True]])
    def test_invalid_terms_rejected(self, terms):
        with pytest.raises(FinancialValidationException) as exc_info:
            calculate_financials(100000, 30, 10, terms)

        assert exc_info.value.field == "terms"

    def test_rate_boundaries_accepted(self):
        """0 and 100 are both valid rates."""
        assert calculate_financials(100000, 0, 100, [30]).admin_fee_cents == 100000
        assert calculate_financials(100000, 100, 0, [30]).financed_amount_cents == 0


# =============================================================================
# Terms Parsing Tests
# =============================================================================

class TestParseTerms:
    """Tests for parse_terms()."""

    def test_comma_separated_string(self):
        assert parse_terms("30, 60, 90") == [30, 60, 90]

    def test_list_passes_through(self):
        assert parse_terms([30, 60]) == [30, 60]

    def test_trailing_comma_ignored(self):
        assert parse_terms("30,60,") == [30, 60]

    @pytest.mark.parametrize("value", ["", "30,abc", "30,-60", " , "])
    def test_invalid_strings_rejected(self, value):
        with pytest.raises(FinancialValidationException):
            parse_terms(value)
