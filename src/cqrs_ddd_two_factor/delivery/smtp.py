"""SMTP email channel."""

from __future__ import annotations

import email.message
import email.policy
import logging
from typing import TYPE_CHECKING

from ..ports import IEmailChannel
from .records import DeliveryRecord

if TYPE_CHECKING:
    from .records import RenderedEmail

logger = logging.getLogger(__name__)


class SmtpEmailChannel(IEmailChannel):
    """
    Async SMTP email channel using aiosmtplib.

    Delivery failures are reported as a failed DeliveryRecord, never raised.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
        from_email: str | None = None,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.from_email = from_email

    def build_message(
        self,
        recipient: str,
        content: RenderedEmail,
        metadata: dict[str, object] | None = None,
    ) -> email.message.EmailMessage:
        metadata = metadata or {}
        from_addr = metadata.get("from_email") or self.from_email
        if not from_addr:
            raise ValueError("Sender email (from_email) is required.")

        message = email.message.EmailMessage(policy=email.policy.default)
        message["To"] = recipient
        message["From"] = str(from_addr)
        message["Subject"] = content.subject
        if metadata.get("reply_to"):
            message["Reply-To"] = str(metadata["reply_to"])

        # Multipart with both text and HTML
        message.set_content(
            content.body_text or content.body_html, subtype="plain", charset="utf-8"
        )
        message.add_alternative(content.body_html, subtype="html", charset="utf-8")
        return message

    async def send(
        self,
        recipient: str,
        content: RenderedEmail,
        metadata: dict[str, object] | None = None,
    ) -> DeliveryRecord:
        message = self.build_message(recipient, content, metadata)

        # Lazy import of aiosmtplib
        try:
            import aiosmtplib
        except ImportError as e:
            raise ImportError(
                "aiosmtplib is required for SmtpEmailChannel. "
                "Install with: pip install 'cqrs-ddd-two-factor[smtp]'"
            ) from e

        try:
            async with aiosmtplib.SMTP(
                hostname=self.host,
                port=self.port,
                timeout=self.timeout,
            ) as smtp:
                if self.use_tls:
                    await smtp.starttls()
                if self.username and self.password:
                    await smtp.login(self.username, self.password)

                await smtp.send_message(message)

            logger.info("Email sent to %s via SMTP", recipient)
            return DeliveryRecord.sent(recipient, provider_id="smtp")

        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", recipient, e)
            return DeliveryRecord.failed(recipient, error=str(e))
