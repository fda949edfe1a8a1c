"""In-memory email OTP code store."""

from __future__ import annotations

import math
import secrets
import time
from typing import TYPE_CHECKING

from ..ports import ICodeStore

if TYPE_CHECKING:
    from collections.abc import Callable


class InMemoryCodeStore(ICodeStore):
    """In-memory code store for TESTING and single-process development.

    ⚠️ WARNING: Codes are stored in plain text in memory and are not shared
    between processes. Use RedisCodeStore in production.

    Args:
        clock: Returns the current time in seconds. Tests pass a fake clock
            to move time forward without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._codes: dict[str, tuple[str, float]] = {}

    def _live(self, subject_id: str) -> tuple[str, float] | None:
        entry = self._codes.get(subject_id)
        if entry is None:
            return None
        if self._clock() >= entry[1]:
            del self._codes[subject_id]
            return None
        return entry

    async def get(self, subject_id: str) -> str | None:
        entry = self._live(subject_id)
        return entry[0] if entry else None

    async def set(self, subject_id: str, code: str, ttl_seconds: int) -> None:
        self._codes[subject_id] = (code, self._clock() + ttl_seconds)

    async def delete(self, subject_id: str) -> None:
        self._codes.pop(subject_id, None)

    async def ttl(self, subject_id: str) -> int:
        entry = self._live(subject_id)
        if entry is None:
            return -2
        return math.ceil(entry[1] - self._clock())

    async def consume(self, subject_id: str, code: str) -> bool:
        # No await between the check and the pop, so this is atomic on the loop.
        entry = self._live(subject_id)
        if entry is None:
            return False
        if not secrets.compare_digest(entry[0].encode(), code.encode()):
            return False
        del self._codes[subject_id]
        return True
