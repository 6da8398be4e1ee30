"""
Tests for LRUCache and the metadata cache built on it.
"""
import unittest
import sys
import os
from unittest.mock import patch

# Add the parent directory to the path so we can import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cache_manager import LRUMetadataCache
from models import MediaDescriptor, MediaMeta
from utils import LRUCache


def descriptor(video_id, title="Title"):
    return MediaDescriptor(id=video_id, title=title, duration=60,
                           meta=MediaMeta(thumbnail=f"https://t.example/{video_id}.jpg"))


class TestLRUCache(unittest.IsolatedAsyncioTestCase):
    """Test cases for the LRUCache class."""

    async def asyncSetUp(self):
        self.cache = LRUCache(maxsize=3, ttl_seconds=10, eviction_percent=1)

    async def test_put_and_get(self):
        await self.cache.put("key1", "value1")
        self.assertEqual(await self.cache.get("key1"), "value1")
        self.assertIsNone(await self.cache.get("non-existent-key"))

    async def test_least_recently_used_is_evicted(self):
        await self.cache.put("key1", "value1")
        await self.cache.put("key2", "value2")
        await self.cache.put("key3", "value3")
        await self.cache.get("key1")  # key2 becomes the oldest
        await self.cache.put("key4", "value4")

        self.assertEqual(await self.cache.get("key1"), "value1")
        self.assertIsNone(await self.cache.get("key2"))
        stats = await self.cache.get_stats()
        self.assertEqual(stats["evictions"], 1)
        self.assertEqual(stats["size"], 3)

    async def test_ttl_expiration(self):
        with patch("utils.time.monotonic", return_value=1000.0):
            await self.cache.put("key1", "value1")
        with patch("utils.time.monotonic", return_value=1011.0):
            self.assertIsNone(await self.cache.get("key1"))
        stats = await self.cache.get_stats()
        self.assertEqual(stats["ttl_expirations"], 1)

    async def test_put_refreshes_existing_key(self):
        await self.cache.put("key1", "value1")
        await self.cache.put("key2", "value2")
        await self.cache.put("key3", "value3")
        await self.cache.put("key1", "updated")  # no eviction, key1 now newest
        await self.cache.put("key4", "value4")

        self.assertEqual(await self.cache.get("key1"), "updated")
        self.assertIsNone(await self.cache.get("key2"))

    async def test_clear(self):
        await self.cache.put("key1", "value1")
        await self.cache.put("key2", "value2")
        self.assertEqual(await self.cache.clear(), 2)
        stats = await self.cache.get_stats()
        self.assertEqual(stats["size"], 0)

    async def test_batch_eviction(self):
        cache = LRUCache(maxsize=10, eviction_percent=50)
        for i in range(10):
            await cache.put(i, i)
        await cache.put("new", "value")

        stats = await cache.get_stats()
        self.assertEqual(stats["evictions"], 5)
        self.assertEqual(stats["size"], 6)
        self.assertIsNone(await cache.get(4))
        self.assertEqual(await cache.get(5), 5)

    async def test_hit_ratio(self):
        await self.cache.put("key1", "value1")
        await self.cache.get("key1")
        await self.cache.get("missing")
        stats = await self.cache.get_stats()
        self.assertEqual(stats["hits"], 1)
        self.assertEqual(stats["misses"], 1)
        self.assertEqual(stats["hit_ratio"], 0.5)

    def test_invalid_maxsize(self):
        with self.assertRaises(ValueError):
            LRUCache(maxsize=0)


class TestLRUMetadataCache(unittest.IsolatedAsyncioTestCase):
    """Test cases for the LRUMetadataCache class."""

    async def test_round_trip_by_namespace(self):
        cache = LRUMetadataCache(maxsize=10, ttl_seconds=60)
        media = descriptor("dQw4w9WgXcQ")
        await cache.put(media)

        self.assertEqual(await cache.get("dQw4w9WgXcQ", "invidious"), media)
        self.assertIsNone(await cache.get("dQw4w9WgXcQ", "other"))

    async def test_put_replaces_existing(self):
        cache = LRUMetadataCache(maxsize=10, ttl_seconds=None)
        await cache.put(descriptor("abc", title="old"))
        await cache.put(descriptor("abc", title="new"))

        cached = await cache.get("abc", "invidious")
        self.assertEqual(cached.title, "new")
        stats = await cache.get_stats()
        self.assertEqual(stats["size"], 1)
        self.assertFalse(stats["ttl_enabled"])

    async def test_clear(self):
        cache = LRUMetadataCache(maxsize=10, ttl_seconds=60)
        await cache.put(descriptor("a"))
        await cache.put(descriptor("b"))
        self.assertEqual(await cache.clear(), 2)
        self.assertIsNone(await cache.get("a", "invidious"))


if __name__ == '__main__':
    unittest.main()
