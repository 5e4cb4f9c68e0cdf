"""
Domain errors raised by the services.
Controllers translate them into HTTP responses.
"""

from fastapi import HTTPException


class DisputeServiceError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DisputeServiceError):
    """Unknown id or code."""

    status_code = 404


class ForbiddenError(DisputeServiceError):
    """The actor failed access control for the dispute."""

    status_code = 403


class ValidationFailedError(DisputeServiceError):
    """The request is well-formed but not acceptable."""

    status_code = 400


class InvalidTransitionError(DisputeServiceError):
    """The requested change violates a state machine."""

    status_code = 409


class ConflictError(DisputeServiceError):
    """Duplicate or already-consumed resource."""

    status_code = 409


class AdapterUnavailableError(DisputeServiceError):
    """Every AI mediator provider failed or timed out."""

    status_code = 503


class DatabaseError(DisputeServiceError):
    """The store rejected or failed an operation."""

    status_code = 500


def to_http_exception(error: DisputeServiceError) -> HTTPException:
    """Map a domain error onto an HTTPException with a matching status code."""
    return HTTPException(status_code=error.status_code, detail=error.message)
