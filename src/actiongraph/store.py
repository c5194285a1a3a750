from __future__ import annotations

from typing import Optional, Protocol

import redis.asyncio as redis

from . import settings


class SourceStore(Protocol):
    """Where the last submitted workflow text survives between sessions."""

    async def load(self) -> Optional[str]: ...

    async def save(self, text: str) -> None: ...


class MemorySourceStore:
    """Process-local store; the default when no redis is configured."""

    def __init__(self, text: Optional[str] = None):
        self.text = text
        self.saves = 0

    async def load(self) -> Optional[str]:
        return self.text

    async def save(self, text: str) -> None:
        self.text = text
        self.saves += 1


class RedisSourceStore:
    def __init__(self, client: "redis.Redis", key: str = settings.STORE_KEY):
        self.client = client
        self.key = key

    @classmethod
    def from_url(cls, url: str, key: str = settings.STORE_KEY) -> "RedisSourceStore":
        return cls(redis.from_url(url, decode_responses=True), key=key)

    async def load(self) -> Optional[str]:
        return await self.client.get(self.key)

    async def save(self, text: str) -> None:
        await self.client.set(self.key, text)


def make_store(url: Optional[str] = settings.REDIS_URL) -> SourceStore:
    if url:
        return RedisSourceStore.from_url(url)
    return MemorySourceStore()
