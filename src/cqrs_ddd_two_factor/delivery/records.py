"""Rendered email and delivery tracking types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class DeliveryStatus(Enum):
    """Delivery status outcomes."""

    SENT = "sent"
    FAILED = "failed"


@dataclass(frozen=True)
class DeliveryRecord:
    """Immutable record of an email delivery attempt."""

    recipient: str
    status: DeliveryStatus
    provider_id: str | None = None
    sent_at: datetime | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.sent_at is None:
            object.__setattr__(self, "sent_at", datetime.now(timezone.utc))

    @property
    def success(self) -> bool:
        return self.status is DeliveryStatus.SENT

    @classmethod
    def sent(cls, recipient: str, provider_id: str | None = None) -> DeliveryRecord:
        """Create a successful delivery record."""
        return cls(
            recipient=recipient,
            status=DeliveryStatus.SENT,
            provider_id=provider_id,
        )

    @classmethod
    def failed(cls, recipient: str, error: str | None = None) -> DeliveryRecord:
        """Create a failed delivery record."""
        return cls(
            recipient=recipient,
            status=DeliveryStatus.FAILED,
            error=error,
        )


@dataclass(frozen=True)
class RenderedEmail:
    """Immutable email ready for delivery."""

    subject: str
    body_html: str
    body_text: str | None = None
