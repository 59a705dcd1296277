import pytest

from launchit.schemas.submission import LocalDraft
from launchit.services.local_drafts import MemoryLocalDraftStore, RedisLocalDraftStore


@pytest.mark.asyncio
async def test_redis_store_round_trip_with_ttl(fake_redis):
    store = RedisLocalDraftStore(fake_redis, prefix="launch_draft", ttl_seconds=60)

    await store.save("client-1", LocalDraft(name="Acme", links=["https://acme.io"]))

    assert "launch_draft:client-1" in fake_redis.store
    assert fake_redis.ttl["launch_draft:client-1"] == 60
    loaded = await store.load("client-1")
    assert loaded.name == "Acme"
    assert loaded.links == ["https://acme.io"]

    await store.clear("client-1")
    assert await store.load("client-1") is None


@pytest.mark.asyncio
async def test_redis_store_drops_unreadable_snapshot(fake_redis):
    fake_redis.store["launch_draft:client-1"] = "{not json"
    store = RedisLocalDraftStore(fake_redis)

    assert await store.load("client-1") is None
    assert "launch_draft:client-1" not in fake_redis.store


@pytest.mark.asyncio
async def test_memory_store_is_keyed_per_client():
    store = MemoryLocalDraftStore()
    await store.save("a", LocalDraft(name="A"))
    await store.save("b", LocalDraft(name="B"))

    assert (await store.load("a")).name == "A"
    await store.clear("a")
    assert await store.load("a") is None
    assert (await store.load("b")).name == "B"
