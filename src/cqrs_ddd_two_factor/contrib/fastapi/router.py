"""Routes for requesting email OTP codes and enrolling TOTP."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...dispatcher import EmailOtpDispatcher
from ...exceptions import DispatchFailedError
from ...subject import TwoFactorSubject
from ...totp import generate_totp_secret_data
from .dependencies import get_subject


def create_two_factor_router(
    dispatcher: EmailOtpDispatcher,
    *,
    issuer: str,
    prefix: str = "/two-factor-authentication",
) -> APIRouter:
    """Create the 2FA self-service router.

    Routes:
        POST {prefix}/email-otp-code: send a new email OTP code. Unlike
            auto-send during verification, a cooldown surfaces as 429.
        POST {prefix}/totp-secret: generate a TOTP secret for enrollment.
            Persisting it on the subject is up to the application.
    """
    router = APIRouter(prefix=prefix, tags=["two-factor-authentication"])

    @router.post("/email-otp-code")
    async def send_email_otp_code(
        subject: TwoFactorSubject = Depends(get_subject),  # noqa: B008
    ) -> Any:
        if not await dispatcher.dispatch(subject):
            return JSONResponse(
                status_code=DispatchFailedError.status_code,
                content={
                    "success": False,
                    "message": DispatchFailedError.default_message,
                },
            )
        return {"success": True}

    @router.post("/totp-secret")
    async def create_totp_secret(
        subject: TwoFactorSubject = Depends(get_subject),  # noqa: B008
    ) -> dict[str, Any]:
        secret_data = generate_totp_secret_data(
            issuer,
            subject.account or subject.subject_id,
            digits=dispatcher.config.totp_digits,
            interval=dispatcher.config.totp_interval,
        )
        return {
            "success": True,
            "data": {"secret": secret_data.secret, "url": secret_data.url},
        }

    return router
