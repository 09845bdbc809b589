"""Import and payment schedule exceptions."""

from .base import DomainException


class PaymentStateException(DomainException):
    """Raised when a schedule entry cannot change in its current status."""

    def __init__(self, entry_id: str, status: str, action: str):
        super().__init__(
            message=f"Cannot {action} payment {entry_id} with status '{status}'",
            code="PAYMENT_STATE_ERROR",
        )
        self.entry_id = entry_id
        self.status = status


class PaymentScheduleException(DomainException):
    """Raised when a schedule cannot be generated for an import."""

    def __init__(self, message: str):
        super().__init__(message=message, code="PAYMENT_SCHEDULE_ERROR")


class ImportStageException(DomainException):
    """Raised when an import cannot move to the requested stage."""

    def __init__(self, import_id: str, from_stage: str, to_stage: str):
        super().__init__(
            message=f"Import {import_id} cannot move from {from_stage} to {to_stage}",
            code="ILLEGAL_IMPORT_STAGE",
        )
        self.from_stage = from_stage
        self.to_stage = to_stage


class SnapshotLockedException(DomainException):
    """Raised when an import's financial snapshot is edited after payments started."""

    def __init__(self, import_id: str):
        super().__init__(
            message=f"Financial snapshot of import {import_id} is locked: payments have started",
            code="SNAPSHOT_LOCKED",
        )
        self.import_id = import_id
