"""Value objects describing a 2FA subject and a single verification call."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field, field_validator

from .value_object import ValueObject


class TwoFactorStatus(ValueObject):
    """Per-method 2FA enablement of a subject."""

    email_otp: bool = Field(default=False, alias="emailOtp")
    totp: bool = False


class TwoFactorSubject(ValueObject):
    """The account undergoing two-factor authentication.

    Owned by the application's account store; the 2FA engine only reads it.

    Attributes:
        subject_id: Unique identifier, also the key of the email OTP record.
        email: Registered email address, if any.
        totp_secret: Exported (base32) TOTP secret, if enrolled.
        status: Which 2FA methods the subject has enabled.
        account: Display name handed to the delivery channel as context.

    Example:
        ```python
        subject = TwoFactorSubject(
            subject_id="admin-1",
            email="root@example.com",
            totp_secret="JBSWY3DPEHPK3PXP",
            status=TwoFactorStatus(email_otp=True, totp=True),
            account="root",
        )
        ```
    """

    subject_id: str
    email: str | None = None
    totp_secret: str | None = None
    status: TwoFactorStatus = Field(default_factory=TwoFactorStatus)
    account: str | None = None


class RequiredFactors(ValueObject):
    """Factors a subject must satisfy for one verification call.

    Serialises as ``{"emailOtp": bool, "totp": bool}`` for API clients.
    """

    email_otp: bool = Field(default=False, alias="emailOtp")
    totp: bool = False

    @property
    def any(self) -> bool:
        """True when at least one factor is required."""
        return self.email_otp or self.totp

    def to_dict(self) -> dict[str, bool]:
        return self.model_dump(by_alias=True)


class SubmittedCodes(ValueObject):
    """Codes submitted with a request.

    Missing and empty values both mean "not submitted".
    """

    email_otp_code: str | None = Field(default=None, alias="emailOtpCode")
    totp_code: str | None = Field(default=None, alias="totpCode")

    @field_validator("email_otp_code", "totp_code", mode="before")
    @classmethod
    def _normalise(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            return value
        return str(value)

    @classmethod
    def from_body(cls, body: Mapping[str, Any] | None) -> SubmittedCodes:
        """Read codes from a decoded request body.

        Unknown keys are ignored and a non-mapping body submits nothing.
        """
        if not isinstance(body, Mapping):
            return cls()
        return cls.model_validate(
            {
                "emailOtpCode": body.get("emailOtpCode"),
                "totpCode": body.get("totpCode"),
            }
        )


__all__: list[str] = [
    "TwoFactorStatus",
    "TwoFactorSubject",
    "RequiredFactors",
    "SubmittedCodes",
]
