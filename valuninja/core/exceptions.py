from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from valuninja.core.context import get_request_id


class AppError(Exception):
    status_code: int = 500
    error_type: str = "APP_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidQueryError(AppError):
    status_code = 400
    error_type = "INVALID_QUERY"


class ScoutError(AppError):
    """Unclassified failure reported by the AI backend or its transport."""

    status_code = 502
    error_type = "SCOUT_ERROR"


class EnvironmentAuthFailure(ScoutError):
    """No service credential could be resolved at call time."""

    status_code = 503
    error_type = "ENVIRONMENT_AUTH_FAILURE"
    marker = "ENVIRONMENT_AUTH_FAILURE"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            f"{self.marker}: {message or 'API_KEY variable not found in current execution context.'}",
            details=details,
        )


class CredentialRejected(ScoutError):
    """The AI backend refused the configured credential."""

    status_code = 502
    error_type = "API_REJECTED_CREDENTIALS"
    marker = "API_REJECTED_CREDENTIALS"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            f"{self.marker}: {message or 'The provided API_KEY was rejected by the AI backend. Verify its validity.'}",
            details=details,
        )


class MalformedResponse(ScoutError):
    """The backend answered, but nothing usable could be recovered from the answer."""

    status_code = 502
    error_type = "MALFORMED_RESPONSE"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        payload: dict[str, Any] = {
            "error": {
                "type": exc.error_type,
                "message": exc.message,
            }
        }
        if exc.details:
            payload["error"]["details"] = exc.details
        trace_id = get_request_id()
        if trace_id:
            payload["error"]["traceId"] = trace_id

        return JSONResponse(status_code=exc.status_code, content=payload)
