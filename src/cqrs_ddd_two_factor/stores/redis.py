"""Redis implementation of the email OTP code store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from redis.exceptions import RedisError

from ..config import TwoFactorConfig
from ..exceptions import CodeStoreError
from ..ports import ICodeStore

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger("cqrs_ddd.two_factor.redis_store")

# Compare-and-delete in one round trip so a code cannot be consumed twice.
CONSUME_SCRIPT = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


class RedisCodeStore(ICodeStore):
    """
    Redis implementation of ICodeStore.

    Codes are plain strings under ``{prefix}{subject_id}`` with a native
    Redis expiry. The prefix defaults to ``TwoFactorConfig.key_prefix``.
    Connection errors are logged and raised as CodeStoreError.
    """

    def __init__(
        self,
        redis_client: Redis,  # type: ignore[type-arg]
        prefix: str | None = None,
        *,
        config: TwoFactorConfig | None = None,
    ) -> None:
        self._redis = redis_client
        if prefix is None:
            prefix = (config or TwoFactorConfig()).key_prefix
        self._prefix = prefix

    def _key(self, subject_id: str) -> str:
        return f"{self._prefix}{subject_id}"

    async def get(self, subject_id: str) -> str | None:
        try:
            val = await self._redis.get(self._key(subject_id))
        except RedisError as e:
            logger.exception("Redis get failed for subject %s", subject_id)
            raise CodeStoreError("get") from e
        if val is None:
            return None
        return val.decode() if isinstance(val, bytes) else str(val)

    async def set(self, subject_id: str, code: str, ttl_seconds: int) -> None:
        try:
            await self._redis.set(self._key(subject_id), code, ex=ttl_seconds)
        except RedisError as e:
            logger.exception("Redis set failed for subject %s", subject_id)
            raise CodeStoreError("set") from e

    async def delete(self, subject_id: str) -> None:
        try:
            await self._redis.delete(self._key(subject_id))
        except RedisError as e:
            logger.exception("Redis delete failed for subject %s", subject_id)
            raise CodeStoreError("delete") from e

    async def ttl(self, subject_id: str) -> int:
        try:
            return int(await self._redis.ttl(self._key(subject_id)))
        except RedisError as e:
            logger.exception("Redis ttl failed for subject %s", subject_id)
            raise CodeStoreError("ttl") from e

    async def consume(self, subject_id: str, code: str) -> bool:
        try:
            deleted = await self._redis.eval(  # type: ignore[no-untyped-call]
                CONSUME_SCRIPT, 1, self._key(subject_id), code
            )
        except RedisError as e:
            logger.exception("Redis consume failed for subject %s", subject_id)
            raise CodeStoreError("consume") from e
        return int(deleted) == 1
