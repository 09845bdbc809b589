"""Financial preview endpoint."""

from fastapi import APIRouter

from src.application.dto import FinancialPreviewResponse
from src.presentation.schemas import (
    ErrorResponseSchema,
    FinancialPreviewResponseSchema,
    FinancialPreviewSchema,
)
from src.service.financial import calculate_financials, finance_settings, parse_terms

financial_router = APIRouter(prefix="/financials")


@financial_router.post(
    "/preview",
    response_model=FinancialPreviewResponseSchema,
    summary="Preview Import Financials",
    description="""
    Compute the down payment, financed amount, admin fee, total cost and
    installments of a prospective import. Nothing is reserved or stored.
    """,
    responses={
        422: {"model": ErrorResponseSchema, "description": "Invalid value, rate or terms"},
    },
)
async def preview_financials(request: FinancialPreviewSchema) -> FinancialPreviewResponseSchema:
    terms = parse_terms(request.terms) if request.terms else finance_settings.default_terms
    breakdown = calculate_financials(
        request.fob_value_cents,
        (
            request.down_payment_rate
            if request.down_payment_rate is not None
            else finance_settings.default_down_payment_rate
        ),
        (
            request.admin_fee_rate
            if request.admin_fee_rate is not None
            else finance_settings.default_admin_fee_rate
        ),
        terms,
    )
    return FinancialPreviewResponseSchema.model_validate(
        FinancialPreviewResponse.from_breakdown(breakdown)
    )
