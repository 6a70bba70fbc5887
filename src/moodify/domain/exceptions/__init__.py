"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, message is stored as an attribute so handlers can read it without
    # parsing str(exception). Don't raise this directly - always pick a specific subclass
    # so exception handlers can map it to the right status code.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found.

    HTTP Status: 404
    """

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityException(DomainException):
    """Raised when trying to create a duplicate entity.

    HTTP Status: 409 (Conflict)
    """

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(DomainException):
    """Input validation failed.

    Carries EVERY violated field, not just the first one. Each entry is a
    ``{"field": "<dotted.path>", "message": "<text>"}`` dict.

    HTTP Status: 400

    Example:
        raise ValidationError(errors=[{"field": "emotion", "message": "Field required"}])
    """

    def __init__(
        self,
        message: str = "Invalid input data",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or []


class BusinessRuleViolation(DomainException):
    """A business rule was violated.

    HTTP Status: 400

    Example:
        raise BusinessRuleViolation("Confirmation email does not match")
    """

    pass


class AuthenticationError(DomainException):
    """No caller identity could be resolved.

    HTTP Status: 401
    """

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ConfigurationError(DomainException):
    """Application misconfiguration.

    HTTP Status: 503 (Service Unavailable)

    Example:
        raise ConfigurationError("Spotify credentials not configured")
    """

    pass


class ExternalServiceError(DomainException):
    """An external service (Spotify) returned an error or was unreachable.

    HTTP Status: 500
    """

    def __init__(
        self,
        message: str,
        service: str = "spotify",
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.service = service
        self.http_status = http_status


class ProviderError(ExternalServiceError):
    """The recommendation provider failed; no partial result is returned.

    HTTP Status: 500
    """

    def __init__(self, message: str = "Failed to generate recommendations") -> None:
        super().__init__(message, service="recommendation_provider")


class PersistenceError(DomainException):
    """Writing history or statistics failed.

    Internal only - the recommendation flow logs and swallows it, it never
    reaches an exception handler.
    """

    pass


__all__ = [
    "AuthenticationError",
    "BusinessRuleViolation",
    "ConfigurationError",
    "DomainException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "ExternalServiceError",
    "PersistenceError",
    "ProviderError",
    "ValidationError",
]
