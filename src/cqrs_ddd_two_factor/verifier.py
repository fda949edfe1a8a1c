"""Two-factor verification of submitted email OTP and TOTP codes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .config import TwoFactorConfig
from .context import get_current_subject
from .exceptions import (
    CooldownActiveError,
    DispatchFailedError,
    Factor,
    InvalidCodeError,
    MissingCodeError,
)
from .subject import RequiredFactors
from .totp import TotpCodeChecker

if TYPE_CHECKING:
    from collections.abc import Callable

    from .dispatcher import EmailOtpDispatcher
    from .ports import ICodeStore
    from .subject import SubmittedCodes, TwoFactorSubject

logger = logging.getLogger("cqrs_ddd.two_factor.verifier")


def compute_required_factors(
    subject: TwoFactorSubject,
    want_email_otp: bool = True,
    want_totp: bool = True,
) -> RequiredFactors:
    """Work out which factors a subject must satisfy.

    A factor is required only when the caller asks for it, the subject has
    enabled it and the subject has what the factor needs (an email address
    or a TOTP secret).
    """
    return RequiredFactors(
        email_otp=bool(want_email_otp and subject.status.email_otp and subject.email),
        totp=bool(want_totp and subject.status.totp and subject.totp_secret),
    )


class TwoFactorVerifier:
    """Checks submitted 2FA codes for a subject.

    Email OTP is always checked before TOTP. A matching email OTP code is
    consumed right away, so it cannot be replayed even when the TOTP check
    that follows fails.

    Example:
        ```python
        verifier = TwoFactorVerifier(
            code_store=store,
            dispatcher=dispatcher,
            config=TwoFactorConfig(),
        )

        try:
            await verifier.require(codes, subject=subject, auto_send_email_otp=True)
        except MissingCodeError as e:
            # e.required_factors tells the client what to ask for
            ...
        ```
    """

    def __init__(
        self,
        *,
        code_store: ICodeStore,
        dispatcher: EmailOtpDispatcher | None = None,
        config: TwoFactorConfig | None = None,
        totp_checker: TotpCodeChecker | None = None,
        subject_provider: Callable[[], TwoFactorSubject] = get_current_subject,
    ) -> None:
        """Initialize the verifier.

        Args:
            code_store: Storage holding issued email OTP codes.
            dispatcher: Used to auto-send a code when none was submitted.
            config: 2FA configuration.
            totp_checker: TOTP checker (default built from config).
            subject_provider: Resolves the subject when none is passed.
        """
        self.code_store = code_store
        self.dispatcher = dispatcher
        self.config = config or TwoFactorConfig()
        self.totp_checker = totp_checker or TotpCodeChecker(
            digits=self.config.totp_digits,
            interval=self.config.totp_interval,
            valid_window=self.config.totp_valid_window,
        )
        self.subject_provider = subject_provider

    async def _auto_send(
        self, subject: TwoFactorSubject, required: RequiredFactors
    ) -> None:
        if self.dispatcher is None:
            raise DispatchFailedError(
                "No email OTP dispatcher configured", required_factors=required
            )

        try:
            delivered = await self.dispatcher.dispatch(subject)
        except CooldownActiveError:
            logger.debug(
                "Skipped email OTP auto-send for subject %s: cooldown active",
                subject.subject_id,
            )
            return
        except Exception as e:
            logger.warning(
                "Email OTP auto-send failed for subject %s: %s", subject.subject_id, e
            )
            raise DispatchFailedError(required_factors=required) from e

        if not delivered:
            raise DispatchFailedError(required_factors=required)

    async def _verify_email_otp(
        self,
        subject: TwoFactorSubject,
        code: str | None,
        required: RequiredFactors,
        auto_send: bool,
    ) -> None:
        if not code:
            if auto_send:
                await self._auto_send(subject, required)
            raise MissingCodeError(Factor.EMAIL_OTP, required)

        if not await self.code_store.consume(subject.subject_id, code):
            raise InvalidCodeError(Factor.EMAIL_OTP, required)

    def _verify_totp(
        self,
        subject: TwoFactorSubject,
        code: str | None,
        required: RequiredFactors,
    ) -> None:
        if not code:
            raise MissingCodeError(Factor.TOTP, required)
        if not self.totp_checker.matches(subject.totp_secret or "", code):
            raise InvalidCodeError(Factor.TOTP, required)

    async def verify(
        self,
        subject: TwoFactorSubject,
        codes: SubmittedCodes,
        required: RequiredFactors,
        auto_send_email_otp: bool = False,
    ) -> None:
        """Check submitted codes against the required factors.

        Args:
            subject: Subject undergoing 2FA.
            codes: Codes submitted with the request.
            required: Factors to check (see compute_required_factors).
            auto_send_email_otp: Issue and send an email OTP code when the
                email OTP code is missing.

        Raises:
            MissingCodeError: A required code was not submitted.
            InvalidCodeError: A submitted code is wrong, expired or used.
            DispatchFailedError: Auto-send failed for a reason other than
                the cooldown.
        """
        if required.email_otp:
            await self._verify_email_otp(
                subject, codes.email_otp_code, required, auto_send_email_otp
            )

        if required.totp:
            self._verify_totp(subject, codes.totp_code, required)

    async def require(
        self,
        codes: SubmittedCodes,
        *,
        subject: TwoFactorSubject | None = None,
        email_otp: bool = True,
        totp: bool = True,
        auto_send_email_otp: bool = False,
    ) -> RequiredFactors:
        """Require two-factor authentication for the current operation.

        Args:
            codes: Codes submitted with the request.
            subject: Subject undergoing 2FA (default: from subject_provider).
            email_otp: Whether the operation asks for email OTP.
            totp: Whether the operation asks for TOTP.
            auto_send_email_otp: Send an email OTP code when it is missing.

        Returns:
            The factors that were required and satisfied.

        Raises:
            UnauthenticatedError: If no subject is passed or resolvable.
            VerificationError: See verify().
        """
        if subject is None:
            subject = self.subject_provider()

        required = compute_required_factors(subject, email_otp, totp)
        await self.verify(subject, codes, required, auto_send_email_otp)
        return required


__all__: list[str] = [
    "TwoFactorVerifier",
    "compute_required_factors",
]
