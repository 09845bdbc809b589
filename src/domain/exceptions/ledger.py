"""Credit ledger exceptions."""

from .base import DomainException


class InsufficientCreditException(DomainException):
    """Raised when a reservation would exceed the approved limit."""

    def __init__(
        self,
        application_id: str,
        requested_cents: int,
        available_cents: int,
    ):
        self.application_id = application_id
        self.requested_cents = requested_cents
        self.available_cents = available_cents
        self.shortfall_cents = requested_cents - available_cents
        super().__init__(
            message=(
                f"Insufficient credit for application {application_id}: "
                f"requested {requested_cents}, available {available_cents}, "
                f"shortfall {self.shortfall_cents}"
            ),
            code="INSUFFICIENT_CREDIT",
        )

    def details(self) -> dict:
        return {
            "requested_cents": self.requested_cents,
            "available_cents": self.available_cents,
            "shortfall_cents": self.shortfall_cents,
        }


class NoApprovedCreditException(DomainException):
    """Raised when an application has no finalized credit limit to draw on."""

    def __init__(self, application_id: str):
        super().__init__(
            message=f"Credit application {application_id} has no finalized credit limit",
            code="NO_APPROVED_CREDIT",
        )
        self.application_id = application_id
