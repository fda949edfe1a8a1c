"""Console email channel for local development."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..ports import IEmailChannel
from .records import DeliveryRecord

if TYPE_CHECKING:
    from .records import RenderedEmail

logger = logging.getLogger("cqrs_ddd.two_factor.console_channel")


class ConsoleEmailChannel(IEmailChannel):
    """
    Prints emails to stdout instead of sending them, so email OTP codes can
    be read without an SMTP server. Only the recipient and subject are logged.
    """

    def __init__(self, output_to_stdout: bool = True) -> None:
        self.output_to_stdout = output_to_stdout

    async def send(
        self,
        recipient: str,
        content: RenderedEmail,
        metadata: dict[str, object] | None = None,
    ) -> DeliveryRecord:
        logger.info("Console email to %s: %s", recipient, content.subject)

        if self.output_to_stdout:
            print(f"[email] {recipient} | {content.subject}")
            if metadata:
                print("[email] " + " ".join(f"{k}={v}" for k, v in metadata.items()))
            print(content.body_text or content.body_html)

        return DeliveryRecord.sent(recipient, provider_id="console")
