"""Code store adapters."""

from .memory import InMemoryCodeStore
from .redis import RedisCodeStore

__all__: list[str] = [
    "InMemoryCodeStore",
    "RedisCodeStore",
]
