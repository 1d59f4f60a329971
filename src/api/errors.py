"""Translation of domain errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from src.exceptions import (
    DomainError,
    DuplicateResourceError,
    ExternalServiceError,
    ResourceNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_http_exception(exc: DomainError) -> HTTPException:
    """Map a domain error onto a status code and a JSON detail body."""

    if isinstance(exc, ValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": exc.message,
                "errors": [
                    {"field": violation.field, "message": violation.message}
                    for violation in exc.violations
                ],
            },
        )

    if isinstance(exc, DuplicateResourceError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": exc.message, "fields": exc.fields},
        )

    if isinstance(exc, ExternalServiceError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": exc.message, "reason": exc.reason.value},
        )

    if isinstance(exc, ResourceNotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": exc.message},
        )

    logger.error("Unhandled domain error: %s", exc, extra={"kind": exc.kind})
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": exc.message},
    )
