"""
Tests for the media store.
"""

import asyncio

import pytest
from shared.media_store import InMemoryMediaStore
from shared.models.media import MediaKind, StoredMedia


def make_media(key: str, kind: MediaKind = MediaKind.VIDEO, data: bytes = b"data") -> StoredMedia:
    return StoredMedia(key=key, kind=kind, data=data, filename=f"{key}.bin")


class TestInMemoryMediaStore:
    """Tests for InMemoryMediaStore."""

    @pytest.mark.asyncio
    async def test_put_get(self):
        store = InMemoryMediaStore()
        key = await store.put(make_media("a", data=b"video"))

        assert key == "a"
        media = await store.get(MediaKind.VIDEO, "a")
        assert media.data == b"video"

    @pytest.mark.asyncio
    async def test_kinds_are_namespaced(self):
        """Test the same key holds video and audio independently."""
        store = InMemoryMediaStore()
        await store.put(make_media("k", MediaKind.VIDEO, b"video"))
        await store.put(make_media("k", MediaKind.AUDIO, b"audio"))

        assert (await store.get(MediaKind.VIDEO, "k")).data == b"video"
        assert (await store.get(MediaKind.AUDIO, "k")).data == b"audio"

    @pytest.mark.asyncio
    async def test_put_replaces(self):
        store = InMemoryMediaStore()
        await store.put(make_media("a", data=b"old"))
        await store.put(make_media("a", data=b"new"))

        assert (await store.get(MediaKind.VIDEO, "a")).data == b"new"

    @pytest.mark.asyncio
    async def test_get_missing(self):
        store = InMemoryMediaStore()
        assert await store.get(MediaKind.AUDIO, "missing") is None

    @pytest.mark.asyncio
    async def test_delete(self):
        store = InMemoryMediaStore()
        await store.put(make_media("a"))

        assert await store.delete(MediaKind.VIDEO, "a") is True
        assert await store.delete(MediaKind.VIDEO, "a") is False
        assert await store.get(MediaKind.VIDEO, "a") is None

    @pytest.mark.asyncio
    async def test_clear_one_kind(self):
        store = InMemoryMediaStore()
        await store.put(make_media("v", MediaKind.VIDEO))
        await store.put(make_media("a", MediaKind.AUDIO))

        await store.clear(MediaKind.VIDEO)

        assert await store.get(MediaKind.VIDEO, "v") is None
        assert await store.get(MediaKind.AUDIO, "a") is not None

    @pytest.mark.asyncio
    async def test_clear_all(self):
        store = InMemoryMediaStore()
        await store.put(make_media("v", MediaKind.VIDEO))
        await store.put(make_media("a", MediaKind.AUDIO))

        await store.clear()

        assert await store.get(MediaKind.VIDEO, "v") is None
        assert await store.get(MediaKind.AUDIO, "a") is None

    @pytest.mark.asyncio
    async def test_oldest_evicted_per_kind(self):
        """Test the capacity limit evicts the oldest entry of the same kind only."""
        store = InMemoryMediaStore(max_items_per_kind=2)
        await store.put(make_media("audio-1", MediaKind.AUDIO))
        await store.put(make_media("v1"))
        await store.put(make_media("v2"))
        await store.put(make_media("v3"))

        assert await store.get(MediaKind.VIDEO, "v1") is None
        assert await store.get(MediaKind.VIDEO, "v2") is not None
        assert await store.get(MediaKind.VIDEO, "v3") is not None
        assert await store.get(MediaKind.AUDIO, "audio-1") is not None

    @pytest.mark.asyncio
    async def test_concurrent_puts(self):
        """Test concurrent writers all land."""
        store = InMemoryMediaStore()
        await asyncio.gather(*(store.put(make_media(f"k{i}")) for i in range(10)))

        for i in range(10):
            assert await store.get(MediaKind.VIDEO, f"k{i}") is not None

    @pytest.mark.asyncio
    async def test_byte_budget_evicts_oldest(self):
        """Test the per-kind byte budget evicts the oldest entries first."""
        store = InMemoryMediaStore(max_bytes_per_kind=10)
        await store.put(make_media("v1", data=b"x" * 4))
        await store.put(make_media("v2", data=b"x" * 4))
        await store.put(make_media("audio-1", MediaKind.AUDIO, b"x" * 8))
        await store.put(make_media("v3", data=b"x" * 4))

        assert await store.get(MediaKind.VIDEO, "v1") is None
        assert await store.get(MediaKind.VIDEO, "v2") is not None
        assert await store.get(MediaKind.VIDEO, "v3") is not None
        assert await store.get(MediaKind.AUDIO, "audio-1") is not None
        assert store.total_bytes(MediaKind.VIDEO) == 8

    @pytest.mark.asyncio
    async def test_byte_budget_never_exceeded(self):
        """Test stored bytes per kind stay within the budget."""
        store = InMemoryMediaStore(max_bytes_per_kind=100)
        for i in range(20):
            await store.put(make_media(f"v{i}", data=b"x" * 30))
            assert store.total_bytes(MediaKind.VIDEO) <= 100

        assert await store.get(MediaKind.VIDEO, "v19") is not None

    @pytest.mark.asyncio
    async def test_oversized_payload_not_kept(self):
        """Test a payload larger than the whole budget is dropped, not stored."""
        store = InMemoryMediaStore(max_bytes_per_kind=10)
        await store.put(make_media("small", data=b"x" * 5))
        key = await store.put(make_media("huge", data=b"x" * 11))

        assert key == "huge"
        assert await store.get(MediaKind.VIDEO, "huge") is None
        assert await store.get(MediaKind.VIDEO, "small") is not None

    @pytest.mark.asyncio
    async def test_replacing_entry_frees_its_bytes(self):
        """Test replacing a key does not count the old payload against the budget."""
        store = InMemoryMediaStore(max_bytes_per_kind=10)
        await store.put(make_media("a", data=b"x" * 4))
        await store.put(make_media("b", data=b"x" * 6))
        await store.put(make_media("b", data=b"y" * 6))

        assert await store.get(MediaKind.VIDEO, "a") is not None
        assert (await store.get(MediaKind.VIDEO, "b")).data == b"y" * 6
