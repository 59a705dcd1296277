"""Rate limiting for the AI-assisted fill route."""
from __future__ import annotations

import time

import redis.asyncio as redis
from fastapi import HTTPException, status

from launchit.core.config import settings

_redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    """Return a cached Redis client instance."""

    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            str(settings.REDIS_URI), decode_responses=True
        )
    return _redis_client


async def check_ai_rate_limit(user_id: str) -> None:
    """Enforce a fixed one-minute window on AI fill requests per user."""

    client = await get_redis()
    minute_window = int(time.time() // 60)
    key = f"rl:ai:{user_id}:{minute_window}"
    current = await client.incr(key)
    if current == 1:
        await client.expire(key, 60)
    if current > settings.limits.ai_fill_rpm:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many AI requests, please wait a minute",
        )
