# nextplay/errors.py
"""
Errors raised by the authorization layer and the routes behind it.

`AppError` subclasses carry the HTTP status they map to; `main.py` renders
them as `{"detail": ...}`, the same body shape FastAPI uses for HTTPException.

`InvalidCredential` and `IdentityNotFound` are raised by the credential
verifier and the identity resolver. They never reach the client directly:
the authorization combinator turns both into `Unauthenticated`.
"""
from __future__ import annotations

from typing import Optional


class AppError(Exception):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class BadRequest(AppError):
    status_code = 400
    default_detail = "Bad request"


class Unauthenticated(AppError):
    status_code = 401
    default_detail = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    default_detail = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_detail = "Not found"


class Conflict(AppError):
    status_code = 409
    default_detail = "Conflict"


class ServiceUnavailable(AppError):
    status_code = 503
    default_detail = "Service unavailable"


class InvalidCredential(Exception):
    """Session credential missing, malformed, expired or badly signed."""


class IdentityNotFound(Exception):
    """The identity named by a credential no longer exists."""
