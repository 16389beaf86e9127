"""Domain-specific exceptions."""


class DomainError(Exception):
    """Base exception for domain errors."""

    pass


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    pass


class PayloadMismatchError(ValidationError):
    """Raised when a log payload does not match the shape its event expects."""

    pass


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

    pass


class LogNotFoundError(NotFoundError):
    """Raised when a log entry id does not resolve."""

    pass


class EntityNotFoundError(NotFoundError):
    """Raised when an entity referenced by id does not resolve."""

    def __init__(self, kind: str, entity_id: int | None):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind.title()} {entity_id} not found")


class AuthenticationError(DomainError):
    """Raised when the caller cannot be identified."""

    pass


class PermissionDeniedError(DomainError):
    """Raised when the caller is not allowed to perform an action."""

    pass


class ImmutableLogError(DomainError):
    """Raised when a flush would rewrite an append-only log entry."""

    pass
