"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to consistent JSON responses.

HumanVerificationError is raised by routes when the verification gate
denies a request; its status and code come from the gate outcome rather
than from the class.

Non-AppError exceptions bubble up as 500s (with Sentry reporting in production).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class ContactDeliveryError(AppError):
    status_code = 500
    error_code = "contact_delivery_failed"


class StatusCarryingError(AppError):
    """AppError whose status and code are decided per instance."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message, details=details)
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code


class RecaptchaVerificationError(StatusCarryingError):
    """Raised by the score verifier when a token cannot be accepted."""

    status_code = 400
    error_code = "RECAPTCHA_FAILED"


class HumanVerificationError(StatusCarryingError):
    """A request was denied by the human verification gate.

    Rendered as ``{"message", "error", "details"?}`` where ``error`` is the
    machine-readable denial code.
    """

    status_code = 400
    error_code = "HUMAN_VERIFICATION_FAILED"

    def to_dict(self) -> dict:
        payload: dict = {"message": self.message, "error": self.error_code}
        if self.details is not None:
            payload["details"] = self.details
        return payload


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Malformed bodies are client errors (400), not 422
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        error = ValidationError("Invalid request body", details=details)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
