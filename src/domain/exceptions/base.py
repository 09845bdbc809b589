"""Base domain exceptions."""


class DomainException(Exception):
    """
    Base exception for all domain-level errors.

    Domain exceptions represent business rule violations or
    domain-specific error conditions.
    """

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def details(self) -> dict:
        """Extra fields included in the error response body."""
        return {}


class NotFoundException(DomainException):
    """Raised when a referenced record does not exist."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource.replace('_', ' ').capitalize()} not found: {resource_id}",
            code=f"{resource.upper()}_NOT_FOUND",
        )
        self.resource = resource
        self.resource_id = resource_id


class DataIntegrityException(DomainException):
    """Raised when persisted data violates a closed set of values."""

    def __init__(self, message: str):
        super().__init__(message=message, code="DATA_INTEGRITY_ERROR")


class ConcurrencyConflictException(DomainException):
    """
    Raised when an atomic check-and-write lost a race.

    Callers should retry the whole operation; nothing was applied.
    """

    def __init__(self, resource_id: str):
        super().__init__(
            message=f"Concurrent modification detected for {resource_id}; retry the operation",
            code="CONCURRENCY_CONFLICT",
        )
        self.resource_id = resource_id


class InvalidRequestException(DomainException):
    """Raised when a use-case request fails validation."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_REQUEST")
