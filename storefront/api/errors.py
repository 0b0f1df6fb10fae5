"""Mapping of domain errors to HTTP errors."""

from fastapi import HTTPException, status

from storefront.domain.exceptions import (
    ConflictError,
    DomainError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)

_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(error: DomainError) -> int:
    """HTTP status code for a domain error."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def to_http_exception(error: DomainError) -> HTTPException:
    """Convert a domain error into the standard error envelope.

    Storage failures are reported without their internal details.
    """
    if isinstance(error, StorageError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error_code": error.error_code,
                "message": "A storage error occurred",
            },
        )

    return HTTPException(
        status_code=status_for(error),
        detail={
            "error_code": error.error_code,
            "message": error.message,
            "details": [
                {"field": key, "message": str(value)}
                for key, value in error.details.items()
            ],
        },
    )
