"""Translate engine errors into HTTP errors."""
from fastapi import HTTPException, status

from timebill.exceptions import (
    BillingEngineError,
    ConflictError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)


STATUS_CODES = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
}


def to_http_exception(error: BillingEngineError) -> HTTPException:
    """
    Build the HTTP error for an engine error.

    Args:
        error: Error raised by a service

    Returns:
        HTTPException whose detail is the error's structured form
    """
    status_code = STATUS_CODES.get(type(error), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=error.to_dict())
