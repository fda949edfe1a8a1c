"""Two-factor authentication errors.

All errors inherit from TwoFactorError. Verification errors carry the
RequiredFactors computed for the call so a client can tell "still need X"
from "X was wrong" from "X failed to send".
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .subject import RequiredFactors


class Factor(str, Enum):
    """Second factors understood by the verifier."""

    EMAIL_OTP = "emailOtp"
    TOTP = "totp"


# ═══════════════════════════════════════════════════════════════
# BASE ERROR
# ═══════════════════════════════════════════════════════════════


class TwoFactorError(Exception):
    """Base class for all two-factor authentication errors.

    Attributes:
        status_code: HTTP-equivalent severity used by the HTTP integration.
    """

    status_code: int = 400
    default_message: str = "Two-factor authentication failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(TwoFactorError):
    """Raised when no subject can be resolved for the current call."""

    status_code = 401
    default_message = "Not authenticated"


# ═══════════════════════════════════════════════════════════════
# VERIFICATION ERRORS
# ═══════════════════════════════════════════════════════════════


class VerificationError(TwoFactorError):
    """Base class for failures of a verification call.

    Attributes:
        required_factors: Factors the subject must satisfy for this call.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        required_factors: RequiredFactors,
    ) -> None:
        super().__init__(message)
        self.required_factors = required_factors


class MissingCodeError(VerificationError):
    """Raised when a required factor's code was not submitted."""

    def __init__(
        self,
        factor: Factor,
        required_factors: RequiredFactors,
        message: str | None = None,
    ) -> None:
        if message is None:
            message = (
                "Please enter the email OTP code"
                if factor is Factor.EMAIL_OTP
                else "Please enter the TOTP code"
            )
        super().__init__(message, required_factors=required_factors)
        self.factor = factor


class InvalidCodeError(VerificationError):
    """Raised when a submitted code does not match the expected value.

    Covers expired and never-issued email OTP codes as well.
    """

    def __init__(
        self,
        factor: Factor,
        required_factors: RequiredFactors,
        message: str | None = None,
    ) -> None:
        if message is None:
            message = (
                "Invalid email OTP code"
                if factor is Factor.EMAIL_OTP
                else "Invalid TOTP code"
            )
        super().__init__(message, required_factors=required_factors)
        self.factor = factor


class DispatchFailedError(VerificationError):
    """Raised when sending an email OTP code during verification failed.

    The underlying failure is chained as ``__cause__``.
    """

    status_code = 500
    default_message = "Failed to send the email OTP code"


# ═══════════════════════════════════════════════════════════════
# DISPATCH ERRORS
# ═══════════════════════════════════════════════════════════════


class DispatchError(TwoFactorError):
    """Base class for errors raised while issuing an email OTP code."""


class NoEmailBoundError(DispatchError):
    """Raised when the subject has no email address to send a code to."""

    default_message = "No email address is bound, cannot send an OTP code"

    def __init__(self, subject_id: str, message: str | None = None) -> None:
        super().__init__(message)
        self.subject_id = subject_id


class CooldownActiveError(DispatchError):
    """Raised when a code is requested before the cooling period elapsed.

    Attributes:
        retry_after: Seconds until a new code may be issued.
    """

    status_code = 429
    default_message = "An email OTP code was already sent, please try again later"

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


# ═══════════════════════════════════════════════════════════════
# INFRASTRUCTURE ERRORS
# ═══════════════════════════════════════════════════════════════


class CryptoSourceError(TwoFactorError):
    """Raised when the secure random source is unavailable."""

    status_code = 500
    default_message = "Secure random source is unavailable"


class CodeStoreError(TwoFactorError):
    """Raised when the transient code store cannot be reached.

    Attributes:
        operation: Store operation that failed (get, set, delete, ttl, consume).
    """

    status_code = 500
    default_message = "Code store operation failed"

    def __init__(self, operation: str, message: str | None = None) -> None:
        super().__init__(message or f"Code store operation '{operation}' failed")
        self.operation = operation


__all__: list[str] = [
    "Factor",
    # Base
    "TwoFactorError",
    "UnauthenticatedError",
    # Verification
    "VerificationError",
    "MissingCodeError",
    "InvalidCodeError",
    "DispatchFailedError",
    # Dispatch
    "DispatchError",
    "NoEmailBoundError",
    "CooldownActiveError",
    # Infrastructure
    "CryptoSourceError",
    "CodeStoreError",
]
