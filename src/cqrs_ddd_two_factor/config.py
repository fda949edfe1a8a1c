"""Two-factor authentication configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timezone, tzinfo

_UTC = timezone.utc


@dataclass(frozen=True)
class TwoFactorConfig:
    """Per-deployment 2FA settings passed to the verifier and dispatcher.

    Attributes:
        email_otp_expiration_seconds: Lifetime of an issued email OTP code.
        send_email_otp_code_cooling_seconds: Minimum seconds between issuances
            for the same subject.
        email_otp_code_length: Number of characters in an email OTP code.
        totp_digits: Number of digits in a TOTP code.
        totp_interval: TOTP time step in seconds.
        totp_valid_window: Accept codes ±N steps around the current one.
        timezone: Timezone used to print the code expiry in emails.
        email_otp_subject: Subject line of the email OTP message.
        key_prefix: Namespace for email OTP records in the code store.
    """

    email_otp_expiration_seconds: int = 300  # 5 minutes
    send_email_otp_code_cooling_seconds: int = 60
    email_otp_code_length: int = 6
    totp_digits: int = 6
    totp_interval: int = 30
    totp_valid_window: int = 0
    timezone: tzinfo = field(default=_UTC)
    email_otp_subject: str = "Email OTP verification code"
    key_prefix: str = "two_factor_authentication:email_otp_code:"

    def __post_init__(self) -> None:
        if self.email_otp_expiration_seconds <= 0:
            raise ValueError("email_otp_expiration_seconds must be positive")
        if self.send_email_otp_code_cooling_seconds < 0:
            raise ValueError("send_email_otp_code_cooling_seconds must not be negative")
        if self.send_email_otp_code_cooling_seconds > self.email_otp_expiration_seconds:
            raise ValueError(
                "send_email_otp_code_cooling_seconds must not exceed "
                "email_otp_expiration_seconds"
            )
        if self.email_otp_code_length <= 0:
            raise ValueError("email_otp_code_length must be positive")
        if self.totp_digits <= 0 or self.totp_interval <= 0:
            raise ValueError("totp_digits and totp_interval must be positive")
        if self.totp_valid_window < 0:
            raise ValueError("totp_valid_window must not be negative")


__all__: list[str] = ["TwoFactorConfig"]
