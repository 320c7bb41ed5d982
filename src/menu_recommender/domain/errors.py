"""Error types shared across services."""


class ValidationError(ValueError):
    """Raised when a request cannot be processed as given."""


class InvalidUserId(ValidationError):
    """Raised when a user identifier is not a valid id."""

    def __init__(self, value: object) -> None:
        super().__init__("Invalid user ID")
        self.value = value


class InvalidCriteriaShape(ValidationError):
    """Raised when criteria cannot be compiled into a filter."""


class ExternalServiceError(RuntimeError):
    """Raised by collaborators that failed to produce a usable answer."""
