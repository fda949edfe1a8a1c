"""Email OTP code issuance with a cooldown between sends."""

from __future__ import annotations

import logging
import secrets
import string
import time
from datetime import datetime
from typing import TYPE_CHECKING

from .config import TwoFactorConfig
from .delivery.records import RenderedEmail
from .exceptions import CooldownActiveError, CryptoSourceError, NoEmailBoundError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .ports import ICodeStore, IEmailChannel
    from .subject import TwoFactorSubject

logger = logging.getLogger("cqrs_ddd.two_factor.dispatcher")

URL_SAFE_ALPHABET = string.ascii_letters + string.digits + "_-"


def format_expiry(moment: datetime) -> str:
    """Format an aware datetime as ``YYYY-MM-DD HH:MM:SS (UTC+HH:MM)``."""
    offset = moment.strftime("%z") or "+0000"
    return f"{moment:%Y-%m-%d %H:%M:%S} (UTC{offset[:3]}:{offset[3:5]})"


class EmailOtpDispatcher:
    """Issues email OTP codes and hands them to an email channel.

    A subject holds at most one live code. Issuing a new one overwrites the
    old record and resets its TTL, which also restarts the cooldown.

    Example:
        ```python
        dispatcher = EmailOtpDispatcher(
            code_store=RedisCodeStore(redis),
            email_channel=SmtpEmailChannel("smtp.example.com", from_email="no-reply@example.com"),
            config=TwoFactorConfig(email_otp_expiration_seconds=300),
        )

        delivered = await dispatcher.dispatch(subject)
        ```
    """

    def __init__(
        self,
        *,
        code_store: ICodeStore,
        email_channel: IEmailChannel,
        config: TwoFactorConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            code_store: Storage for email OTP codes.
            email_channel: Channel used to deliver codes.
            config: 2FA configuration.
            clock: Returns the current Unix time, used for the expiry shown
                in the email.
        """
        self.code_store = code_store
        self.email_channel = email_channel
        self.config = config or TwoFactorConfig()
        self._clock = clock

    def _generate_code(self) -> str:
        try:
            return "".join(
                secrets.choice(URL_SAFE_ALPHABET)
                for _ in range(self.config.email_otp_code_length)
            )
        except NotImplementedError as e:
            raise CryptoSourceError() from e

    async def _check_cooldown(self, subject_id: str) -> None:
        ttl = await self.code_store.ttl(subject_id)
        if ttl <= 0:
            return

        elapsed = self.config.email_otp_expiration_seconds - ttl
        cooling = self.config.send_email_otp_code_cooling_seconds
        if elapsed < cooling:
            logger.debug("Email OTP cooldown active for subject %s", subject_id)
            raise CooldownActiveError(retry_after=cooling - elapsed)

    def render(self, code: str, expires_at: datetime) -> RenderedEmail:
        """Build the email announcing ``code`` and its expiry."""
        expiry = format_expiry(expires_at)
        notice = (
            "Please note that once this code passes verification it is "
            "invalidated immediately, even if the subsequent operation "
            "(such as signing in) fails."
        )
        html_lines = [
            f"Your email OTP verification code is: <strong>{code}</strong>",
            f"This code is valid until {expiry}.",
            notice,
        ]
        text_lines = [
            f"Your email OTP verification code is: {code}",
            f"This code is valid until {expiry}.",
            notice,
        ]
        return RenderedEmail(
            subject=self.config.email_otp_subject,
            body_html="<br />".join(html_lines),
            body_text="\n".join(text_lines),
        )

    async def dispatch(self, subject: TwoFactorSubject) -> bool:
        """Issue a new email OTP code and send it to the subject.

        Args:
            subject: Subject to send the code to.

        Returns:
            Whether the email channel reported a successful delivery. The code
            stays in the store even when delivery failed.

        Raises:
            NoEmailBoundError: If the subject has no email address.
            CooldownActiveError: If the previous code was issued less than
                the cooling period ago.
            CryptoSourceError: If the OS random source is unavailable.
        """
        if not subject.email:
            raise NoEmailBoundError(subject.subject_id)

        await self._check_cooldown(subject.subject_id)

        expiration = self.config.email_otp_expiration_seconds
        code = self._generate_code()
        await self.code_store.set(subject.subject_id, code, expiration)
        logger.info("Issued email OTP code for subject %s", subject.subject_id)

        expires_at = datetime.fromtimestamp(
            self._clock() + expiration, tz=self.config.timezone
        )
        record = await self.email_channel.send(
            subject.email,
            self.render(code, expires_at),
            {"subject_id": subject.subject_id, "account": subject.account},
        )
        if not record.success:
            logger.warning(
                "Email OTP delivery to subject %s failed: %s",
                subject.subject_id,
                record.error,
            )
        return record.success


__all__: list[str] = [
    "EmailOtpDispatcher",
    "URL_SAFE_ALPHABET",
    "format_expiry",
]
