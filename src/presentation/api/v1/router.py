from fastapi import APIRouter

from .credit_applications import credit_application_router
from .financials import financial_router
from .imports import import_router
from .payments import payment_router

router = APIRouter()

router.include_router(credit_application_router, tags=["Credit Applications"])
router.include_router(import_router, tags=["Imports"])
router.include_router(payment_router, tags=["Payments"])
router.include_router(financial_router, tags=["Financials"])
