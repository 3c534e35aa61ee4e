"""
Centralized exception handling for RideShare API.

This module provides:
- Base APIException class extending FastAPI's HTTPException.
- Custom domain-specific exceptions with appropriate status codes and headers.
- Utility functions for translating DB errors, logging, and routing exceptions.

Usage:
    - Raise specific exceptions in route handlers or guards.
    - Use `handle()` to normalize raw exceptions (DB, unexpected errors) into API-friendly responses.
"""

from traceback import format_exception
from logging import getLogger
from typing import List, Optional
from fastapi import status, HTTPException
from sqlalchemy.exc import IntegrityError
from psycopg2.errorcodes import UNIQUE_VIOLATION, FOREIGN_KEY_VIOLATION


# ---------------------------------------------------------------------------
# Utility functions
# ---------------------------------------------------------------------------
def integrityErrorCode(e: IntegrityError) -> Optional[str]:
    """
    Resolve the SQLSTATE of a database integrity error.

    PostgreSQL (psycopg2) exposes the SQLSTATE directly as `pgcode`.
    SQLite only reports a message, which is mapped onto the same codes.
    """
    pgcode = getattr(e.orig, "pgcode", None)
    if pgcode is not None:
        return pgcode
    message = str(e.orig)
    if "UNIQUE constraint failed" in message:
        return UNIQUE_VIOLATION
    if "FOREIGN KEY constraint failed" in message:
        return FOREIGN_KEY_VIOLATION
    return None


def formatValidationErrors(errors: List[dict]) -> str:
    """
    Turn the error list of a request validation failure into a single message.

    Missing keys take priority over every other error so that the client
    always learns about absent required fields first.
    """
    for error in errors:
        if error["type"] == "json_invalid":
            return "Request body is not valid JSON"
        if error["type"] == "missing" or (
            error.get("input", "") is None and len(error["loc"]) > 1
        ):
            return f"{error['loc'][-1]} is required"

    error = errors[0]
    field = error["loc"][-1] if len(error["loc"]) > 1 else error["loc"][0]
    return f"Invalid {field}: {error['msg']}"


def logException(e: Exception) -> None:
    """Log an exception with traceback using Uvicorn's error logger."""
    detail = str(format_exception(type(e), e, e.__traceback__))
    logger = getLogger("uvicorn.error")
    logger.error(detail)


# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------
class APIException(HTTPException):
    """
    Base class for all application-specific exceptions.

    Provides default handling of status_code, detail, and headers.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    detail = None
    headers = None

    def __init__(self, detail: str = None, **kwargs):
        kwargs.setdefault("status_code", self.status_code)
        kwargs.setdefault("headers", self.headers)
        super().__init__(detail=detail or self.detail, **kwargs)


# ---------------------------------------------------------------------------
# Exception handling entrypoint
# ---------------------------------------------------------------------------
def handle(
    e: Exception,
    uniqueMessage: str = "Resource already exists",
    foreignKeyMessage: str = "Referenced resource does not exist",
):
    """
    Normalize and re-raise exceptions as API-friendly errors.

    Integrity errors raised at write time are translated into
    `UniqueViolation` or `ForeignKeyViolation` carrying the given messages.
    Anything that is not an `APIException` is logged and reported as
    `InternalError`.
    """
    if isinstance(e, APIException):
        raise e
    if isinstance(e, IntegrityError):
        code = integrityErrorCode(e)
        if code == UNIQUE_VIOLATION:
            raise UniqueViolation(uniqueMessage)
        if code == FOREIGN_KEY_VIOLATION:
            raise ForeignKeyViolation(foreignKeyMessage)

    logException(e)
    raise InternalError() from e


# ---------------------------------------------------------------------------
# Exception Classes
# ---------------------------------------------------------------------------
class MissingField(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    headers = {"X-Error": "MissingField"}

    def __init__(self, fieldName: str):
        super().__init__(detail=f"{fieldName} is required")


class InvalidValue(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid value provided"
    headers = {"X-Error": "InvalidValue"}


class InvalidIdentifier(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid ID provided"
    headers = {"X-Error": "InvalidIdentifier"}


class InvalidDeleteType(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = 'Invalid delete type. It must be either "soft" or "hard"'
    headers = {"X-Error": "InvalidDeleteType"}


class UnknownValue(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"
    headers = {"X-Error": "UnknownValue"}


class UniqueViolation(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Resource already exists"
    headers = {"X-Error": "UniqueViolation"}


class ForeignKeyViolation(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Referenced resource does not exist"
    headers = {"X-Error": "ForeignKeyViolation"}


class InternalError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Internal server error. Please try again later."
    headers = {"X-Error": "InternalError"}
