"""Map domain error kinds to HTTP status codes."""

import logging

from fastapi import HTTPException, status

from domain.model.errors import DomainError, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DUPLICATE_EMAIL: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

INVALID_CREDENTIALS = "Invalid email or password"


def to_http_exception(error: DomainError) -> HTTPException:
    """Build the HTTPException for a domain error.

    Internal errors get a generic message; the cause is only logged.
    """
    status_code = STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if error.kind is ErrorKind.INTERNAL:
        logger.error("Unexpected error", exc_info=error)
        return HTTPException(status_code=status_code, detail="Unexpected error occurred")
    if error.kind is ErrorKind.AUTHENTICATION:
        return HTTPException(status_code=status_code, detail=INVALID_CREDENTIALS)
    return HTTPException(status_code=status_code, detail=str(error))
