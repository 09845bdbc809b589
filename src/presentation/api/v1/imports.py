"""Import API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path

from src.application.dto import CreateImportRequest
from src.application.services import ImportService, PaymentScheduleService
from src.core.dependencies import get_actor, get_import_service, get_payment_service
from src.domain.entities import Actor
from src.presentation.schemas import (
    AdvanceImportSchema,
    CreateImportSchema,
    ErrorResponseSchema,
    ImportResponseSchema,
    PaymentScheduleResponseSchema,
    UpdateImportValueSchema,
)

import_router = APIRouter(
    prefix="/imports",
    responses={
        401: {"model": ErrorResponseSchema, "description": "Actor headers missing or invalid"},
        403: {"model": ErrorResponseSchema, "description": "Actor not allowed"},
        404: {"model": ErrorResponseSchema, "description": "Import not found"},
    },
)

ImportId = Annotated[UUID, Path(description="UUID of the import")]
CurrentActor = Annotated[Actor, Depends(get_actor)]
Imports = Annotated[ImportService, Depends(get_import_service)]


@import_router.post(
    "",
    response_model=ImportResponseSchema,
    status_code=201,
    summary="Create Import",
    description="""
    Create an import against a finalized credit application.

    Reserves the financed amount on the application's credit ledger and
    schedules the down payment, due today.
    """,
    responses={
        409: {"model": ErrorResponseSchema, "description": "No approved or insufficient credit"},
        422: {"model": ErrorResponseSchema, "description": "Invalid FOB value"},
    },
)
async def create_import(
    request: CreateImportSchema,
    actor: CurrentActor,
    service: Imports,
) -> ImportResponseSchema:
    dto = CreateImportRequest(
        application_id=request.application_id,
        name=request.name,
        fob_value_cents=request.fob_value_cents,
        currency=request.currency,
    )
    response = await service.create_import(actor, dto)
    return ImportResponseSchema.model_validate(response)


@import_router.get(
    "/{import_id}",
    response_model=ImportResponseSchema,
    summary="Get Import",
)
async def get_import(
    import_id: ImportId,
    actor: CurrentActor,
    service: Imports,
) -> ImportResponseSchema:
    response = await service.get_import(actor, import_id)
    return ImportResponseSchema.model_validate(response)


@import_router.post(
    "/{import_id}/advance",
    response_model=ImportResponseSchema,
    summary="Advance Import Stage",
    description="Move the import one stage forward. Installments are generated on delivery to the agent.",
    responses={409: {"model": ErrorResponseSchema, "description": "Illegal stage move"}},
)
async def advance_import(
    import_id: ImportId,
    actor: CurrentActor,
    service: Imports,
    request: Annotated[AdvanceImportSchema, Body()] = AdvanceImportSchema(),
) -> ImportResponseSchema:
    to_stage = request.to_stage.value if request.to_stage else None
    response = await service.advance_import_stage(actor, import_id, to_stage)
    return ImportResponseSchema.model_validate(response)


@import_router.post(
    "/{import_id}/cancel",
    response_model=ImportResponseSchema,
    summary="Cancel Import",
    description="Release the import's credit and cancel its unpaid payments.",
    responses={409: {"model": ErrorResponseSchema, "description": "Import already terminal"}},
)
async def cancel_import(
    import_id: ImportId,
    actor: CurrentActor,
    service: Imports,
) -> ImportResponseSchema:
    response = await service.cancel_import(actor, import_id)
    return ImportResponseSchema.model_validate(response)


@import_router.patch(
    "/{import_id}/value",
    response_model=ImportResponseSchema,
    summary="Update Import Value",
    description="Recompute the financial snapshot for a new FOB value while no payment is made.",
    responses={409: {"model": ErrorResponseSchema, "description": "Snapshot locked or insufficient credit"}},
)
async def update_import_value(
    import_id: ImportId,
    request: UpdateImportValueSchema,
    actor: CurrentActor,
    service: Imports,
) -> ImportResponseSchema:
    response = await service.update_import_value(actor, import_id, request.fob_value_cents)
    return ImportResponseSchema.model_validate(response)


@import_router.get(
    "/{import_id}/payments",
    response_model=PaymentScheduleResponseSchema,
    summary="Get Payment Schedule",
)
async def get_payment_schedule(
    import_id: ImportId,
    actor: CurrentActor,
    payment_service: Annotated[PaymentScheduleService, Depends(get_payment_service)],
) -> PaymentScheduleResponseSchema:
    response = await payment_service.get_schedule(actor, import_id)
    return PaymentScheduleResponseSchema.model_validate(response)
