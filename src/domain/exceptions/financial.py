"""Financial computation exceptions."""

from .base import DomainException


class FinancialValidationException(DomainException):
    """Raised when calculator inputs are malformed or out of range."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=message,
            code="FINANCIAL_VALIDATION_ERROR",
        )
        self.field = field

    def details(self) -> dict:
        return {"field": self.field} if self.field else {}
