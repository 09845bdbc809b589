"""Credit application API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from src.application.dto import (
    CreateApplicationRequest,
    FinalizeRequest,
    FinancialDecisionRequest,
    PreAnalysisDecisionRequest,
)
from src.application.services import CreditApplicationService, CreditLedgerService
from src.core.dependencies import get_actor, get_credit_application_service, get_ledger_service
from src.domain.entities import Actor
from src.presentation.schemas import (
    ApplicationResponseSchema,
    CreateApplicationSchema,
    ErrorResponseSchema,
    FinalizeSchema,
    FinancialDecisionSchema,
    LedgerResponseSchema,
    PreAnalysisDecisionSchema,
    ReviewSchema,
    StatusHistoryResponseSchema,
)

credit_application_router = APIRouter(
    prefix="/credit-applications",
    responses={
        401: {"model": ErrorResponseSchema, "description": "Actor headers missing or invalid"},
        403: {"model": ErrorResponseSchema, "description": "Actor role not allowed"},
        404: {"model": ErrorResponseSchema, "description": "Application not found"},
        409: {"model": ErrorResponseSchema, "description": "Illegal status transition"},
    },
)

ApplicationId = Annotated[UUID, Path(description="UUID of the credit application")]
CurrentActor = Annotated[Actor, Depends(get_actor)]
ApplicationService = Annotated[CreditApplicationService, Depends(get_credit_application_service)]


@credit_application_router.post(
    "",
    response_model=ApplicationResponseSchema,
    status_code=201,
    summary="Create Credit Application",
    description="Open a draft credit application for the acting importer.",
)
async def create_application(
    request: CreateApplicationSchema,
    actor: CurrentActor,
    service: ApplicationService,
) -> ApplicationResponseSchema:
    dto = CreateApplicationRequest(requested_amount_cents=request.requested_amount_cents)
    response = await service.create_application(actor, dto)
    return ApplicationResponseSchema.model_validate(response)


@credit_application_router.get(
    "/{application_id}",
    response_model=ApplicationResponseSchema,
    summary="Get Credit Application",
)
async def get_application(
    application_id: ApplicationId,
    actor: CurrentActor,
    service: ApplicationService,
) -> ApplicationResponseSchema:
    response = await service.get_application(application_id)
    return ApplicationResponseSchema.model_validate(response)


@credit_application_router.get(
    "/{application_id}/history",
    response_model=StatusHistoryResponseSchema,
    summary="Get Status History",
    description="Every applied status change with its actor, oldest first.",
)
async def get_history(
    application_id: ApplicationId,
    actor: CurrentActor,
    service: ApplicationService,
) -> StatusHistoryResponseSchema:
    response = await service.get_history(application_id)
    return StatusHistoryResponseSchema.model_validate(response)


@credit_application_router.post(
    "/{application_id}/submit",
    response_model=ApplicationResponseSchema,
    summary="Submit Application",
)
async def submit_application(
    application_id: ApplicationId,
    actor: CurrentActor,
    service: ApplicationService,
) -> ApplicationResponseSchema:
    response = await service.submit_application(application_id, actor)
    return ApplicationResponseSchema.model_validate(response)


@credit_application_router.post(
    "/{application_id}/cancel",
    response_model=ApplicationResponseSchema,
    summary="Cancel Application",
)
async def cancel_application(
    application_id: ApplicationId,
    actor: CurrentActor,
    service: ApplicationService,
) -> ApplicationResponseSchema:
    response = await service.cancel_application(application_id, actor)
    return ApplicationResponseSchema.model_validate(response)


@credit_application_router.post(
    "/{application_id}/review",
    response_model=ApplicationResponseSchema,
    summary="Review Application",
    description="Take a pending application under review, or reject it.",
)
async def review_application(
    application_id: ApplicationId,
    request: ReviewSchema,
    actor: CurrentActor,
    service: ApplicationService,
) -> ApplicationResponseSchema:
    response = await service.review_application(application_id, actor, request.status)
    return ApplicationResponseSchema.model_validate(response)


@credit_application_router.post(
    "/{application_id}/pre-analysis",
    response_model=ApplicationResponseSchema,
    summary="Record Pre-Analysis Decision",
)
async def record_pre_analysis_decision(
    application_id: ApplicationId,
    request: PreAnalysisDecisionSchema,
    actor: CurrentActor,
    service: ApplicationService,
) -> ApplicationResponseSchema:
    dto = PreAnalysisDecisionRequest(status=request.status.value, notes=request.notes)
    response = await service.record_pre_analysis_decision(application_id, actor, dto)
    return ApplicationResponseSchema.model_validate(response)


@credit_application_router.post(
    "/{application_id}/financial",
    response_model=ApplicationResponseSchema,
    summary="Record Financial Decision",
)
async def record_financial_decision(
    application_id: ApplicationId,
    request: FinancialDecisionSchema,
    actor: CurrentActor,
    service: ApplicationService,
) -> ApplicationResponseSchema:
    dto = FinancialDecisionRequest(
        status=request.status.value,
        approved_amount_cents=request.approved_amount_cents,
        approved_terms=request.approved_terms,
        notes=request.notes,
    )
    response = await service.record_financial_decision(application_id, actor, dto)
    return ApplicationResponseSchema.model_validate(response)


@credit_application_router.post(
    "/{application_id}/finalize",
    response_model=ApplicationResponseSchema,
    summary="Finalize Application",
    description="""
    Publish the final credit limit, rates and terms.

    Requires the financial status to be approved. The application is
    approved in the same step.
    """,
)
async def finalize_application(
    application_id: ApplicationId,
    request: FinalizeSchema,
    actor: CurrentActor,
    service: ApplicationService,
) -> ApplicationResponseSchema:
    dto = FinalizeRequest(
        final_credit_limit_cents=request.final_credit_limit_cents,
        down_payment_rate=request.down_payment_rate,
        admin_fee_rate=request.admin_fee_rate,
        terms=request.terms,
    )
    response = await service.finalize_admin(application_id, actor, dto)
    return ApplicationResponseSchema.model_validate(response)


@credit_application_router.get(
    "/{application_id}/ledger",
    response_model=LedgerResponseSchema,
    summary="Get Credit Ledger",
    description="Limit, usage, available credit and every reservation of an application.",
)
async def get_ledger(
    application_id: ApplicationId,
    actor: CurrentActor,
    ledger_service: Annotated[CreditLedgerService, Depends(get_ledger_service)],
) -> LedgerResponseSchema:
    response = await ledger_service.get_ledger(application_id)
    return LedgerResponseSchema.model_validate(response)
