"""Email delivery channels for email OTP codes."""

from .console import ConsoleEmailChannel
from .fake import InMemoryEmailChannel, SentEmail
from .records import DeliveryRecord, DeliveryStatus, RenderedEmail
from .smtp import SmtpEmailChannel

__all__: list[str] = [
    "DeliveryRecord",
    "DeliveryStatus",
    "RenderedEmail",
    "SmtpEmailChannel",
    "ConsoleEmailChannel",
    "InMemoryEmailChannel",
    "SentEmail",
]
