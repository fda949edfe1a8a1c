"""Render two-factor errors as the API's JSON response envelope."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ...exceptions import (
    CooldownActiveError,
    TwoFactorError,
    UnauthenticatedError,
    VerificationError,
)


def build_error_envelope(exc: TwoFactorError) -> dict[str, Any]:
    """Build ``{success, message, data?}`` for an error.

    Verification errors add ``data.requiredTwoFactorAuthentications``.
    """
    envelope: dict[str, Any] = {"success": False, "message": exc.message}
    if isinstance(exc, VerificationError):
        envelope["data"] = {
            "requiredTwoFactorAuthentications": exc.required_factors.to_dict()
        }
    return envelope


async def two_factor_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, TwoFactorError):
        raise exc

    headers: dict[str, str] = {}
    if isinstance(exc, CooldownActiveError):
        headers["Retry-After"] = str(exc.retry_after)
    elif isinstance(exc, UnauthenticatedError):
        headers["WWW-Authenticate"] = "Bearer"

    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_envelope(exc),
        headers=headers or None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handler for every TwoFactorError subclass."""
    app.add_exception_handler(TwoFactorError, two_factor_error_handler)
