"""Domain errors raised by the rule services.

Services raise these and never return placeholder values; the API layer turns
them into HTTP responses through ``to_http_exception``.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainError(Exception):
    """Base class for rule-engine errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "domain_error"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={"message": self.message, "code": self.code, "details": self.details},
        )


class ValidationError(DomainError):
    """Malformed dates or times, non-positive durations, missing linkage."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "validation_error"


class InsufficientCreditError(DomainError):
    """The referenced makeup credit is expired or lacks the minutes needed."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "credit_unavailable"


class InvalidTransitionError(DomainError):
    """A status change out of a terminal state or otherwise not allowed."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "invalid_transition"


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
