"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Route handlers catch them and map their ``kind`` to HTTP status codes.
Expected absence (unknown id or email) is a ``None`` return, not an error.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Tag carried by every domain error so the boundary can map it deterministically."""
    VALIDATION = 'validation'
    DUPLICATE_EMAIL = 'duplicate_email'
    NOT_FOUND = 'not_found'
    AUTHENTICATION = 'authentication'
    INTERNAL = 'internal'


class DomainError(Exception):
    """Base class for all domain errors."""
    kind: ErrorKind = ErrorKind.INTERNAL


class ValidationError(DomainError):
    """Input violates a business validation rule."""
    kind = ErrorKind.VALIDATION


class NotFoundError(DomainError):
    """Requested entity does not exist."""
    kind = ErrorKind.NOT_FOUND


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""


class DuplicateEmailError(DuplicateError):
    """Another user record already owns this email."""
    kind = ErrorKind.DUPLICATE_EMAIL

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"A user with email '{email}' already exists")


class AuthenticationError(DomainError):
    """Credentials were rejected. Never says why."""
    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class InternalError(DomainError):
    """Unexpected storage or signing failure.

    The underlying exception is kept on ``cause`` for diagnostics only.
    """
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)
