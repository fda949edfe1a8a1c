"""FastAPI dependencies for two-factor authentication.

Provides Depends functions for resolving the subject, reading submitted
codes and guarding routes with 2FA.
"""

from collections.abc import Awaitable, Callable

from fastapi import Depends, Request

from ...context import get_current_subject
from ...subject import SubmittedCodes, TwoFactorSubject
from ...verifier import TwoFactorVerifier


def get_subject() -> TwoFactorSubject:
    """Get the current 2FA subject.

    The authentication layer must publish the subject with
    set_current_subject() before the route runs. Override this dependency to
    resolve the subject some other way.

    Raises:
        UnauthenticatedError: If no subject is set. The handlers installed by
            register_exception_handlers() render it as a 401 envelope.
    """
    return get_current_subject()


async def read_submitted_codes(request: Request) -> SubmittedCodes:
    """Read ``emailOtpCode`` / ``totpCode`` from the JSON request body.

    An empty or malformed body counts as nothing submitted.
    """
    try:
        body = await request.json()
    except ValueError:
        return SubmittedCodes()
    return SubmittedCodes.from_body(body)


def require_two_factor(
    verifier: TwoFactorVerifier,
    *,
    email_otp: bool = True,
    totp: bool = True,
    auto_send_email_otp: bool = False,
) -> Callable[..., Awaitable[TwoFactorSubject]]:
    """Create a dependency that requires 2FA for a route.

    Verification errors propagate to the handlers installed by
    register_exception_handlers().

    Example:
        ```python
        @router.delete("/admins/{admin_id}")
        async def delete_admin(
            subject = Depends(require_two_factor(verifier, auto_send_email_otp=True)),
        ):
            ...
        ```
    """

    async def dependency(
        codes: SubmittedCodes = Depends(read_submitted_codes),  # noqa: B008
        subject: TwoFactorSubject = Depends(get_subject),  # noqa: B008
    ) -> TwoFactorSubject:
        await verifier.require(
            codes,
            subject=subject,
            email_otp=email_otp,
            totp=totp,
            auto_send_email_otp=auto_send_email_otp,
        )
        return subject

    return dependency
