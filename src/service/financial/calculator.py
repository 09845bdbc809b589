"""
Financial computation for import financing.

Turns an import's declared FOB value into a down payment, a financed amount,
an admin fee, a total cost and a per-installment amount. This is the only
place that breakdown is derived; every caller goes through
`calculate_financials`.

All monetary values are whole cents. Rates are percentages.
"""

from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Sequence, Union

from src.domain.exceptions import FinancialValidationException

RateLike = Union[Decimal, int, str, float]

_HUNDRED = Decimal(100)
_UNIT = Decimal(1)


@dataclass(frozen=True)
class FinancialBreakdown:
    """
    Result of a financial calculation.

    Attributes:
        fob_value_cents: Declared FOB value
        down_payment_cents: fob * down_payment_rate / 100
        financed_amount_cents: fob - down_payment
        admin_fee_cents: financed_amount * admin_fee_rate / 100
        total_cost_cents: fob + admin_fee
        installment_cents: financed_amount / len(terms), rounded down
        installment_remainder_cents: cents left over by the division
        terms: The installment day-counts used
    """

    fob_value_cents: int
    down_payment_rate: Decimal
    admin_fee_rate: Decimal
    down_payment_cents: int
    financed_amount_cents: int
    admin_fee_cents: int
    total_cost_cents: int
    installment_cents: int
    installment_remainder_cents: int
    terms: tuple

    @property
    def installment_count(self) -> int:
        return len(self.terms)

    def installment_amounts(self) -> List[int]:
        """
        Per-installment amounts that sum exactly to the financed amount.

        The remainder from the division is added to the first installment.
        """
        return [
            self.installment_cents + (self.installment_remainder_cents if i == 0 else 0)
            for i in range(self.installment_count)
        ]


def _to_rate(value: RateLike, field: str) -> Decimal:
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise FinancialValidationException(f"{field} is not a number: {value!r}", field)

    if not rate.is_finite():
        raise FinancialValidationException(f"{field} must be finite", field)
    if rate < 0 or rate > _HUNDRED:
        raise FinancialValidationException(
            f"{field} must be between 0 and 100, got {rate}", field
        )
    return rate


def _validate_terms(terms: Sequence[int]) -> tuple:
    if not terms:
        raise FinancialValidationException("terms cannot be empty", "terms")
    for term in terms:
        if isinstance(term, bool) or not isinstance(term, int) or term <= 0:
            raise FinancialValidationException(
                f"terms must be positive day-counts, got {term!r}", "terms"
            )
    return tuple(terms)


def _percent_of(amount_cents: int, rate: Decimal) -> int:
    return int((Decimal(amount_cents) * rate / _HUNDRED).quantize(_UNIT, rounding=ROUND_HALF_UP))


def calculate_financials(
    fob_value_cents: int,
    down_payment_rate: RateLike,
    admin_fee_rate: RateLike,
    terms: Sequence[int],
) -> FinancialBreakdown:
    """
    Compute the financial breakdown of an import.

    The admin fee is levied on the financed amount only, never on the down
    payment or the full FOB value.

    Args:
        fob_value_cents: Declared FOB value in cents (must be positive)
        down_payment_rate: Down payment percentage (0-100)
        admin_fee_rate: Admin fee percentage (0-100)
        terms: Installment day-counts (non-empty, positive)

    Returns:
        FinancialBreakdown with all amounts in cents

    Raises:
        FinancialValidationException: If any input is invalid
    """
    if isinstance(fob_value_cents, bool) or not isinstance(fob_value_cents, int):
        raise FinancialValidationException(
            f"fob_value_cents must be an integer, got {fob_value_cents!r}",
            "fob_value_cents",
        )
    if fob_value_cents <= 0:
        raise FinancialValidationException(
            f"fob_value_cents must be positive, got {fob_value_cents}",
            "fob_value_cents",
        )

    dp_rate = _to_rate(down_payment_rate, "down_payment_rate")
    fee_rate = _to_rate(admin_fee_rate, "admin_fee_rate")
    validated_terms = _validate_terms(terms)

    down_payment = _percent_of(fob_value_cents, dp_rate)
    financed_amount = fob_value_cents - down_payment
    admin_fee = _percent_of(financed_amount, fee_rate)
    total_cost = fob_value_cents + admin_fee

    count = len(validated_terms)
    installment = int((Decimal(financed_amount) / count).quantize(_UNIT, rounding=ROUND_DOWN))
    remainder = financed_amount - installment * count

    return FinancialBreakdown(
        fob_value_cents=fob_value_cents,
        down_payment_rate=dp_rate,
        admin_fee_rate=fee_rate,
        down_payment_cents=down_payment,
        financed_amount_cents=financed_amount,
        admin_fee_cents=admin_fee,
        total_cost_cents=total_cost,
        installment_cents=installment,
        installment_remainder_cents=remainder,
        terms=validated_terms,
    )


def parse_terms(value: Union[str, Sequence[int]]) -> List[int]:
    """
    Parse installment terms from a list or a comma-separated string.

    Example:
        "30, 60, 90" -> [30, 60, 90]

    Raises:
        FinancialValidationException: If the terms are empty or not positive integers
    """
    if isinstance(value, str):
        parts = [part.strip() for part in value.split(",") if part.strip()]
        try:
            parsed = [int(part) for part in parts]
        except ValueError:
            raise FinancialValidationException(f"Invalid terms: {value!r}", "terms")
    else:
        parsed = list(value)

    return list(_validate_terms(parsed))
