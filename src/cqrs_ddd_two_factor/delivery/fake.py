"""In-memory email channel for test assertions."""

from __future__ import annotations

from dataclasses import dataclass

from ..ports import IEmailChannel
from .records import DeliveryRecord, RenderedEmail


@dataclass
class SentEmail:
    """Record of a sent email for test assertions."""

    recipient: str
    content: RenderedEmail
    metadata: dict[str, object] | None


class InMemoryEmailChannel(IEmailChannel):
    """
    Test double (Fake) that stores emails in a list for assertions.

    Set ``succeed=False`` to simulate a provider rejecting every email.
    """

    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.sent_messages: list[SentEmail] = []

    async def send(
        self,
        recipient: str,
        content: RenderedEmail,
        metadata: dict[str, object] | None = None,
    ) -> DeliveryRecord:
        self.sent_messages.append(SentEmail(recipient, content, metadata))
        if not self.succeed:
            return DeliveryRecord.failed(recipient, error="simulated failure")
        return DeliveryRecord.sent(recipient, provider_id="test-id")

    def assert_sent(self, recipient: str, count: int = 1) -> None:
        """Helper for test assertions."""
        matches = [m for m in self.sent_messages if m.recipient == recipient]
        if len(matches) != count:
            raise AssertionError(
                f"Expected {count} emails to {recipient}, but found {len(matches)}."
            )

    def last_message_to(self, recipient: str) -> SentEmail | None:
        for message in reversed(self.sent_messages):
            if message.recipient == recipient:
                return message
        return None

    def clear(self) -> None:
        """Clear all sent emails."""
        self.sent_messages.clear()
