# amenity_engine/core/exceptions.py
"""
Domain-specific exceptions for the amenity reservation engine.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.

Error kinds:
- NotFoundException: an amenity or reservation id does not resolve
- ValidationException: the request payload itself is malformed or out of policy
- BusinessRuleException / ConflictException: the request is well formed but
  the current stored state does not allow it
- ServiceException / RepositoryException: infrastructure failures
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class ReservationConflictException(ConflictException):
    """Raised when a reservation overlaps an active reservation."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "Time slot is not available",
            code="RESERVATION_CONFLICT",
            details=details or {},
        )


class InvalidStatusTransitionException(BusinessRuleException):
    """Raised when a reservation cannot move from its current status."""

    def __init__(self, message: str, current_status: str, requested_status: str):
        super().__init__(
            message=message,
            code="INVALID_STATUS_TRANSITION",
            details={
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
