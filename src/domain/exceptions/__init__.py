"""Domain Exceptions - Business rule violations and domain errors."""

from .base import (
    ConcurrencyConflictException,
    DataIntegrityException,
    DomainException,
    InvalidRequestException,
    NotFoundException,
)
from .financial import FinancialValidationException
from .ledger import InsufficientCreditException, NoApprovedCreditException
from .payment import (
    ImportStageException,
    PaymentScheduleException,
    PaymentStateException,
    SnapshotLockedException,
)
from .workflow import (
    ActorNotAuthenticatedException,
    ActorNotAuthorizedException,
    IllegalTransitionException,
)

__all__ = [
    "DomainException",
    "NotFoundException",
    "InvalidRequestException",
    "DataIntegrityException",
    "ConcurrencyConflictException",
    "FinancialValidationException",
    "InsufficientCreditException",
    "NoApprovedCreditException",
    "ImportStageException",
    "PaymentScheduleException",
    "PaymentStateException",
    "SnapshotLockedException",
    "ActorNotAuthenticatedException",
    "ActorNotAuthorizedException",
    "IllegalTransitionException",
]
