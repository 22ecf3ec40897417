# app/core/errors.py
"""
Application error taxonomy.

Every error carries a stable ``code`` and HTTP ``status_code`` so the
exception handlers in ``app.main`` can render the standard error shape
``{"error": CODE, "message": "...", "details": {...}}`` without leaking
internals. Messages must be safe to show to clients.
"""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    """Missing or malformed input; the client can fix it."""

    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Invalid request payload"


class InvalidCredentialsError(AppError):
    """
    Authentication failed.

    Deliberately uninformative: unknown email, inactive account and wrong
    password all produce this exact error.
    """

    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Invalid email or password"


class MissingTokenError(AppError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Authorization header with Bearer token required"


class InvalidTokenError(AppError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Invalid or expired token"


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Not found"


class UpstreamUnavailableError(AppError):
    """A tenant store or the geocoding service failed for infrastructure reasons."""

    code = "UPSTREAM_UNAVAILABLE"
    status_code = 503
    default_message = "Upstream service unavailable"


class InternalError(AppError):
    pass
