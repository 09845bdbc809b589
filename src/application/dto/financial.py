"""Data transfer objects for financial previews."""

from dataclasses import dataclass
from typing import List

from src.service.financial import FinancialBreakdown


@dataclass(frozen=True)
class FinancialPreviewResponse:
    """Breakdown of a prospective import, including per-installment amounts."""

    fob_value_cents: int
    down_payment_rate: str
    admin_fee_rate: str
    terms: List[int]
    down_payment_cents: int
    financed_amount_cents: int
    admin_fee_cents: int
    total_cost_cents: int
    installment_cents: int
    installment_amounts: List[int]

    @classmethod
    def from_breakdown(cls, breakdown: FinancialBreakdown) -> "FinancialPreviewResponse":
        return cls(
            fob_value_cents=breakdown.fob_value_cents,
            down_payment_rate=str(breakdown.down_payment_rate),
            admin_fee_rate=str(breakdown.admin_fee_rate),
            terms=list(breakdown.terms),
            down_payment_cents=breakdown.down_payment_cents,
            financed_amount_cents=breakdown.financed_amount_cents,
            admin_fee_cents=breakdown.admin_fee_cents,
            total_cost_cents=breakdown.total_cost_cents,
            installment_cents=breakdown.installment_cents,
            installment_amounts=breakdown.installment_amounts(),
        )
