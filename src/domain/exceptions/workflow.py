"""Status workflow exceptions."""

from .base import DomainException


class IllegalTransitionException(DomainException):
    """
    Raised when a status transition is not allowed.

    Identifies the axis, the attempted edge and the unmet condition.
    """

    def __init__(self, axis: str, from_status: str, to_status: str, reason: str):
        super().__init__(
            message=f"Illegal {axis} transition {from_status} -> {to_status}: {reason}",
            code="ILLEGAL_TRANSITION",
        )
        self.axis = axis
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason

    def details(self) -> dict:
        return {
            "axis": self.axis,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "reason": self.reason,
        }


class ActorNotAuthorizedException(DomainException):
    """Raised when the acting role may not perform an operation."""

    def __init__(self, role: str, action: str):
        super().__init__(
            message=f"Role '{role}' is not allowed to {action}",
            code="ACTOR_NOT_AUTHORIZED",
        )
        self.role = role
        self.action = action


class ActorNotAuthenticatedException(DomainException):
    """Raised when a request carries no usable actor identity."""

    def __init__(self, message: str = "Actor identity is missing or invalid"):
        super().__init__(message=message, code="ACTOR_NOT_AUTHENTICATED")
