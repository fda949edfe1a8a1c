"""Subject context management using ContextVar.

Lets the authentication layer publish the subject undergoing 2FA once per
request, so the verifier can resolve it without it being passed around.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from typing import TYPE_CHECKING

from .exceptions import UnauthenticatedError

if TYPE_CHECKING:
    from .subject import TwoFactorSubject


_subject_context: ContextVar[TwoFactorSubject | None] = ContextVar(
    "two_factor_subject", default=None
)


def get_current_subject() -> TwoFactorSubject:
    """Get the current subject from context.

    Returns:
        The current TwoFactorSubject.

    Raises:
        UnauthenticatedError: If no subject is set in the context.
    """
    subject = _subject_context.get()
    if subject is None:
        raise UnauthenticatedError()
    return subject


def get_current_subject_or_none() -> TwoFactorSubject | None:
    return _subject_context.get()


def set_current_subject(subject: TwoFactorSubject) -> Token[TwoFactorSubject | None]:
    """Set the subject in the current async context.

    Example:
        ```python
        token = set_current_subject(subject)
        try:
            await verifier.require(codes)
        finally:
            reset_current_subject(token)
        ```
    """
    return _subject_context.set(subject)


def reset_current_subject(token: Token[TwoFactorSubject | None]) -> None:
    """Reset the subject context to its previous state."""
    _subject_context.reset(token)


def clear_current_subject() -> None:
    _subject_context.set(None)


__all__: list[str] = [
    "get_current_subject",
    "get_current_subject_or_none",
    "set_current_subject",
    "reset_current_subject",
    "clear_current_subject",
]
