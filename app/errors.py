"""
Exception classes and provider error translation.

Every error raised by the services carries an HTTP status and an error code so
the handlers in main.py can answer API and page requests consistently.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)

# Postgres / PostgREST codes returned by the hosted database
UNIQUE_VIOLATION = "23505"
NOT_NULL_VIOLATION = "23502"
UNDEFINED_TABLE = "42P01"
INSUFFICIENT_PRIVILEGE = "42501"
NO_ROWS = "PGRST116"


class AppError(HTTPException):
    """Base application error with a machine readable code."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class NotFoundError(AppError):
    def __init__(self, resource: str, identifier: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found: {identifier}",
            error_code="NOT_FOUND",
        )


class ValidationError(AppError):
    def __init__(self, detail: str, field: Optional[str] = None):
        error_code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=error_code,
        )


class ConflictError(AppError):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT, detail=detail, error_code="CONFLICT"
        )


class UnauthorizedError(AppError):
    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
        )


class ForbiddenError(AppError):
    def __init__(self, detail: str = "Access denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN, detail=detail, error_code="FORBIDDEN"
        )


class ServiceUnavailableError(AppError):
    def __init__(self, detail: str, error_code: str = "SERVICE_UNAVAILABLE"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code=error_code,
        )


class SessionUnavailableError(ServiceUnavailableError):
    """The auth provider could not be reached after all retries."""

    def __init__(self, detail: str = "Session verification is taking longer than usual"):
        super().__init__(detail=detail, error_code="SESSION_UNAVAILABLE")


def translate_postgrest_error(
    error: APIError, resource: str, identifier: str = "", action: str = "access"
) -> AppError:
    """Map a PostgREST error onto the application error hierarchy."""
    code = getattr(error, "code", None)
    message = getattr(error, "message", None) or str(error)
    logger.error(
        "Supabase error while trying to %s %s: code=%s message=%s details=%s hint=%s",
        action,
        resource,
        code,
        message,
        getattr(error, "details", None),
        getattr(error, "hint", None),
        extra={"extra_fields": {"resource": resource, "action": action, "pg_code": code}},
    )

    if code == UNIQUE_VIOLATION:
        if resource == "workout":
            return ConflictError("A workout already exists for this date")
        return ConflictError(f"A {resource} with these values already exists")
    if code == NOT_NULL_VIOLATION:
        return ValidationError("Required fields are missing")
    if code == UNDEFINED_TABLE:
        return ServiceUnavailableError(
            f"The {resource} table does not exist", error_code="TABLE_MISSING"
        )
    if code == NO_ROWS:
        return NotFoundError(resource.capitalize(), identifier)
    if code == INSUFFICIENT_PRIVILEGE:
        return ForbiddenError(f"Not allowed to {action} {resource}")
    return AppError(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Failed to {action} {resource}: {message}",
        error_code="DATABASE_ERROR",
    )


def database_unavailable(
    error: Exception, resource: str, identifier: str = "", action: str = "access"
) -> ServiceUnavailableError:
    """The hosted database could not be reached (connection, timeout, transport)."""
    logger.error(
        "Database unreachable while trying to %s %s %s: %r",
        action,
        resource,
        identifier,
        error,
        extra={"extra_fields": {"resource": resource, "action": action}},
    )
    return ServiceUnavailableError(
        "The database is not reachable right now, please try again",
        error_code="DATABASE_UNAVAILABLE",
    )
