"""TOTP (Time-based One-Time Password) secrets and codes.

Works with any RFC 6238 authenticator app (Google Authenticator, Microsoft
Authenticator, Authy, 1Password, FreeOTP). Uses pyotp internally.
"""

from __future__ import annotations

import base64
import secrets
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import pyotp

from .exceptions import CryptoSourceError

if TYPE_CHECKING:
    from collections.abc import Callable

# Key length is drawn from [MIN, MAX) bytes.
MIN_SECRET_BYTES = 16
MAX_SECRET_BYTES = 20


@dataclass(frozen=True)
class TotpSecretData:
    """Enrollment data for a new TOTP secret.

    Attributes:
        secret: Unpadded base32 secret. Persist it on the subject.
        url: otpauth:// provisioning URI for QR code generation.
    """

    secret: str
    url: str

    @property
    def manual_key(self) -> str:
        """Secret formatted as groups of 4 characters for manual entry."""
        return " ".join(self.secret[i : i + 4] for i in range(0, len(self.secret), 4))


def _random_key() -> bytes:
    try:
        length = MIN_SECRET_BYTES + secrets.randbelow(MAX_SECRET_BYTES - MIN_SECRET_BYTES)
        return secrets.token_bytes(length)
    except NotImplementedError as e:
        raise CryptoSourceError() from e


def export_key(key: bytes) -> str:
    """Export raw key bytes as an unpadded base32 string."""
    return base64.b32encode(key).decode("ascii").rstrip("=")


def generate_totp_secret_data(
    issuer: str,
    name: str,
    *,
    digits: int = 6,
    interval: int = 30,
) -> TotpSecretData:
    """Generate a TOTP secret and its provisioning URI.

    Args:
        issuer: Application name shown in the authenticator app.
        name: Account name shown in the authenticator app.
        digits: Number of digits in generated codes.
        interval: Time step in seconds.

    Returns:
        TotpSecretData with the exported secret and the otpauth:// URI.

    Raises:
        CryptoSourceError: If the OS random source is unavailable.
    """
    secret = export_key(_random_key())
    url = pyotp.TOTP(secret, digits=digits, interval=interval).provisioning_uri(
        name=name,
        issuer_name=issuer,
    )
    return TotpSecretData(secret=secret, url=url)


class TotpCodeChecker:
    """Computes and checks TOTP codes for a stored secret.

    Example:
        ```python
        checker = TotpCodeChecker()
        if checker.matches(subject.totp_secret, "123456"):
            print("Valid!")
        ```
    """

    def __init__(
        self,
        *,
        digits: int = 6,
        interval: int = 30,
        valid_window: int = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the checker.

        Args:
            digits: Number of digits in a code (default 6).
            interval: Time step in seconds (default 30).
            valid_window: Accept codes ±N steps for clock drift (default 0).
            clock: Returns the current Unix time.
        """
        self.digits = digits
        self.interval = interval
        self.valid_window = valid_window
        self._clock = clock

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self.digits, interval=self.interval)

    def expected(self, secret: str, for_time: float | None = None) -> str:
        """Code for the time step containing ``for_time`` (default: now)."""
        return self._totp(secret).at(self._clock() if for_time is None else for_time)

    def matches(self, secret: str, code: str) -> bool:
        """Check a submitted code against the current time step.

        The comparison is exact: unlike ``pyotp.TOTP.verify`` the code is not
        Unicode-normalised, so full-width digits do not match.
        """
        totp = self._totp(secret)
        now = self._clock()
        submitted = code.encode()
        return any(
            secrets.compare_digest(submitted, totp.at(now, offset).encode())
            for offset in range(-self.valid_window, self.valid_window + 1)
        )


__all__: list[str] = [
    "TotpSecretData",
    "TotpCodeChecker",
    "export_key",
    "generate_totp_secret_data",
]
