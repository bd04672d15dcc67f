"""Dependency injection for FastAPI endpoints"""

import uuid
from datetime import date
from fastapi import HTTPException, Request

from miles_ledger.domain.exceptions import DomainException, EntityNotFoundError


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_today() -> date:
    """Reference date for overdue and quota windows"""
    return date.today()


def parse_id(value: str, label: str) -> uuid.UUID:
    """Parse a path identifier, rejecting malformed values with 400"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID format")


def to_http_error(error: DomainException) -> HTTPException:
    """Map domain failures to HTTP status codes"""
    if isinstance(error, EntityNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    return HTTPException(status_code=422, detail=str(error))
