class DomainError(Exception):
    """Base exception for business rule violations.

    ``status_code`` is the HTTP status the controllers answer with.
    """

    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidSelectionError(ValidationError):
    """Raised when the food type is not on the menu."""


class OrderWindowClosedError(ValidationError):
    """Raised when orders are not accepted at the current time."""


class InvalidCodeError(ValidationError):
    """Raised when a presented QR code matches no active code for today."""


class CodeExpiredError(DomainError):
    """Raised when the matched QR code is past its expiry instant."""


class ConflictError(DomainError):
    """Raised when a per-user-per-day record already exists."""


class DuplicateOrderError(ConflictError):
    pass


class AlreadyCheckedInError(ConflictError):
    pass


class NotFoundError(DomainError):
    status_code = 404


class AuthenticationError(DomainError):
    """Raised when the bearer credential is missing or invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
