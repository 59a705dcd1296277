"""Ephemeral draft snapshots kept outside the data service.

This tier only bootstraps a form before sign-in or before the first
autosave; once a server draft is loaded it takes precedence.
"""
from __future__ import annotations

from typing import Dict, Optional, Protocol

import redis.asyncio as redis

from launchit.core.config import settings
from launchit.schemas.submission import LocalDraft


class LocalDraftStore(Protocol):
    async def load(self, key: str) -> Optional[LocalDraft]: ...

    async def save(self, key: str, draft: LocalDraft) -> None: ...

    async def clear(self, key: str) -> None: ...


class MemoryLocalDraftStore:
    """Process-local store, used when Redis is not configured."""

    def __init__(self) -> None:
        self._drafts: Dict[str, str] = {}

    async def load(self, key: str) -> Optional[LocalDraft]:
        raw = self._drafts.get(key)
        return LocalDraft.model_validate_json(raw) if raw else None

    async def save(self, key: str, draft: LocalDraft) -> None:
        self._drafts[key] = draft.model_dump_json()

    async def clear(self, key: str) -> None:
        self._drafts.pop(key, None)


class RedisLocalDraftStore:
    """Snapshots stored as JSON strings with a sliding TTL."""

    def __init__(
        self,
        client: redis.Redis,
        prefix: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        self._client = client
        self._prefix = prefix or settings.local_drafts.key_prefix
        self._ttl = ttl_seconds or settings.local_drafts.ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def load(self, key: str) -> Optional[LocalDraft]:
        raw = await self._client.get(self._key(key))
        if not raw:
            return None
        try:
            return LocalDraft.model_validate_json(raw)
        except ValueError:
            # unreadable snapshots are treated as absent
            await self._client.delete(self._key(key))
            return None

    async def save(self, key: str, draft: LocalDraft) -> None:
        await self._client.set(self._key(key), draft.model_dump_json(), ex=self._ttl)

    async def clear(self, key: str) -> None:
        await self._client.delete(self._key(key))
