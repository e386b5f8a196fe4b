"""Errors raised by the site-config pipeline and how they render over HTTP."""
from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse


class SiteBuilderError(Exception):
    """Base error for this package."""

    status_code = 500
    public_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class BadRequest(SiteBuilderError):
    """Missing fields or a schema violation. Carries field-level errors when known."""

    status_code = 400
    public_message = "Invalid payload"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors


class Conflict(SiteBuilderError):
    """A record with the same unique key already exists."""

    status_code = 409
    public_message = "Already exists"


class Unauthorized(SiteBuilderError):
    status_code = 401
    public_message = "Invalid credentials"


class InternalError(SiteBuilderError):
    status_code = 500
    public_message = "Server error"


def error_response(ex: SiteBuilderError) -> JSONResponse:
    body: Dict[str, Any] = {"message": ex.message}
    if isinstance(ex, BadRequest) and ex.errors is not None:
        body["errors"] = ex.errors
    return JSONResponse(body, status_code=ex.status_code)
