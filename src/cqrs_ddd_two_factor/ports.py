"""Ports (protocols) the 2FA engine depends on.

The engine owns no storage or transport. Applications plug in a code store
and an email channel, or use the adapters under ``stores`` and ``delivery``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .delivery.records import DeliveryRecord, RenderedEmail


@runtime_checkable
class ICodeStore(Protocol):
    """Protocol for the transient email OTP code store.

    Holds at most one live code per subject, each with a time-to-live.
    """

    async def get(self, subject_id: str) -> str | None:
        """Get the live code for a subject.

        Args:
            subject_id: Subject identifier.

        Returns:
            The code, or None if never issued or expired.
        """
        ...

    async def set(self, subject_id: str, code: str, ttl_seconds: int) -> None:
        """Store a code, replacing any previous one and resetting its TTL.

        Args:
            subject_id: Subject identifier.
            code: The email OTP code.
            ttl_seconds: Time-to-live in seconds.
        """
        ...

    async def delete(self, subject_id: str) -> None:
        """Delete the code for a subject.

        Args:
            subject_id: Subject identifier.
        """
        ...

    async def ttl(self, subject_id: str) -> int:
        """Get remaining seconds of the subject's code.

        Args:
            subject_id: Subject identifier.

        Returns:
            Remaining seconds; zero or negative if there is no live code.
        """
        ...

    async def consume(self, subject_id: str, code: str) -> bool:
        """Atomically delete the subject's code if it equals ``code``.

        Args:
            subject_id: Subject identifier.
            code: Submitted code (exact, case-sensitive match).

        Returns:
            True if the code matched and was removed.
        """
        ...


@runtime_checkable
class IEmailChannel(Protocol):
    """Protocol for sending emails.

    Adapters must explicitly declare: class SmtpEmailChannel(IEmailChannel):
    """

    async def send(
        self,
        recipient: str,
        content: RenderedEmail,
        metadata: dict[str, object] | None = None,
    ) -> DeliveryRecord:
        """Send an email and return the delivery record."""
        ...


__all__: list[str] = [
    "ICodeStore",
    "IEmailChannel",
]
