"""Payment schedule API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path

from src.application.dto import UpdatePaymentRequest
from src.application.services import PaymentScheduleService
from src.core.dependencies import get_actor, get_payment_service, require_roles
from src.domain.entities import Actor, ActorRole
from src.presentation.schemas import (
    ErrorResponseSchema,
    PaymentResponseSchema,
    RecordPaymentSchema,
    UpdatePaymentSchema,
)

payment_router = APIRouter(
    prefix="/payments",
    responses={
        401: {"model": ErrorResponseSchema, "description": "Actor headers missing or invalid"},
        403: {"model": ErrorResponseSchema, "description": "Actor role not allowed"},
        404: {"model": ErrorResponseSchema, "description": "Payment not found"},
        409: {"model": ErrorResponseSchema, "description": "Payment not in an editable state"},
    },
)

PaymentId = Annotated[UUID, Path(description="UUID of the payment schedule entry")]
Payments = Annotated[PaymentScheduleService, Depends(get_payment_service)]


@payment_router.get(
    "/{payment_id}",
    response_model=PaymentResponseSchema,
    summary="Get Payment",
)
async def get_payment(
    payment_id: PaymentId,
    actor: Annotated[Actor, Depends(get_actor)],
    service: Payments,
) -> PaymentResponseSchema:
    response = await service.get_entry(actor, payment_id)
    return PaymentResponseSchema.model_validate(response)


@payment_router.patch(
    "/{payment_id}",
    response_model=PaymentResponseSchema,
    summary="Edit Payment",
    description="Change the amount or due date of an unpaid entry. Paid entries are immutable.",
)
async def update_payment(
    payment_id: PaymentId,
    request: UpdatePaymentSchema,
    actor: Annotated[Actor, Depends(require_roles(ActorRole.ADMIN))],
    service: Payments,
) -> PaymentResponseSchema:
    dto = UpdatePaymentRequest(amount_cents=request.amount_cents, due_date=request.due_date)
    response = await service.update_entry(payment_id, dto)
    return PaymentResponseSchema.model_validate(response)


@payment_router.post(
    "/{payment_id}/pay",
    response_model=PaymentResponseSchema,
    summary="Record Payment",
    description="Mark a pending or overdue entry as paid.",
)
async def record_payment(
    payment_id: PaymentId,
    actor: Annotated[Actor, Depends(require_roles(ActorRole.IMPORTER, ActorRole.ADMIN))],
    service: Payments,
    request: Annotated[RecordPaymentSchema, Body()] = RecordPaymentSchema(),
) -> PaymentResponseSchema:
    response = await service.record_payment(actor, payment_id, paid_at=request.paid_at)
    return PaymentResponseSchema.model_validate(response)
