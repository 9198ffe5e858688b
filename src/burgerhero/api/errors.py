"""
burgerhero.api.errors

Exception handlers for the FastAPI app.

Responsibilities:
- Map the error taxonomy to HTTP responses with a user-visible message.
- Act as the top-level guard for programming errors: return diagnostic
  information plus a cache-clear-and-reload recovery action.
"""

from __future__ import annotations

import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from burgerhero.auth.guard import SIGN_IN_PATH
from burgerhero.errors import AuthFailure, NetworkOrBackendError, ProfileUnrecoverable
from burgerhero.observability.logging import get_logger

log = get_logger(__name__)

RESET_PATH = "/v1/debug/reset"


async def auth_failure_handler(request: Request, exc: AuthFailure) -> JSONResponse:
    log.info("auth_failure", message=exc.message)
    return JSONResponse(
        status_code=HTTP_401_UNAUTHORIZED,
        content={"error": "auth_failure", "message": exc.message},
    )


async def profile_unrecoverable_handler(request: Request, exc: ProfileUnrecoverable) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_401_UNAUTHORIZED,
        content={
            "error": "profile_unrecoverable",
            "message": exc.message,
            "redirect_to": SIGN_IN_PATH,
        },
    )


async def backend_error_handler(request: Request, exc: NetworkOrBackendError) -> JSONResponse:
    log.warning("backend_error", message=exc.message, upstream_status=exc.status_code)
    return JSONResponse(
        status_code=HTTP_502_BAD_GATEWAY,
        content={"error": "backend_error", "message": exc.message},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled_error", error_type=type(exc).__name__)
    diagnostic: dict[str, object] = {
        "type": type(exc).__name__,
        "message": str(exc) or "Unknown error",
    }
    if request.app.state.settings.env != "prod":
        diagnostic["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "diagnostic": diagnostic,
            "recovery": {"action": "clear_cache_and_reload", "method": "POST", "path": RESET_PATH},
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthFailure, auth_failure_handler)
    app.add_exception_handler(ProfileUnrecoverable, profile_unrecoverable_handler)
    app.add_exception_handler(NetworkOrBackendError, backend_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
