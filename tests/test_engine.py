"""
Tests for input classification and the MediaQueryEngine class.
"""
import unittest
import sys
import os
from unittest.mock import MagicMock

# Add the parent directory to the path so we can import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cache_manager import LRUMetadataCache
from exceptions import InvalidInputError, PlaylistTooLongError
from models import MediaDescriptor, MediaMeta, SearchPage
from services.engine import MediaQueryEngine, classify_input
from services.invidious import InvidiousClient


def descriptor(video_id):
    return MediaDescriptor(id=video_id, title=f"Video {video_id}", duration=60,
                           meta=MediaMeta(thumbnail=f"https://t.example/{video_id}.jpg"))


class TestClassifyInput(unittest.TestCase):
    """Test cases for classify_input."""

    def setUp(self):
        classify_input.cache_clear()

    def test_watch_url(self):
        self.assertEqual(classify_input("https://www.youtube.com/watch?v=dQw4w9WgXcQ"),
                         ("dQw4w9WgXcQ", "video"))

    def test_watch_url_with_extra_params(self):
        self.assertEqual(classify_input("https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ&t=42"),
                         ("dQw4w9WgXcQ", "video"))

    def test_invidious_front_end_url(self):
        self.assertEqual(classify_input("https://invidious.example.org/watch?v=dQw4w9WgXcQ"),
                         ("dQw4w9WgXcQ", "video"))

    def test_short_link(self):
        self.assertEqual(classify_input("https://youtu.be/dQw4w9WgXcQ"), ("dQw4w9WgXcQ", "video"))

    def test_shorts_and_embed(self):
        self.assertEqual(classify_input("https://www.youtube.com/shorts/dQw4w9WgXcQ"),
                         ("dQw4w9WgXcQ", "video"))
        self.assertEqual(classify_input("https://www.youtube.com/embed/dQw4w9WgXcQ"),
                         ("dQw4w9WgXcQ", "video"))

    def test_playlist_url(self):
        self.assertEqual(
            classify_input("https://www.youtube.com/playlist?list=PLrAXtmErZgOeiKm4sgNOknGvNjby9efdf"),
            ("PLrAXtmErZgOeiKm4sgNOknGvNjby9efdf", "playlist"),
        )

    def test_search_url_is_unquoted(self):
        self.assertEqual(classify_input("https://www.youtube.com/results?search_query=lofi+hip%20hop"),
                         ("lofi hip hop", "search"))

    def test_free_text_is_search(self):
        self.assertEqual(classify_input("  never gonna give you up "), ("never gonna give you up", "search"))

    def test_unmatched_url_is_search(self):
        self.assertEqual(classify_input("https://example.com/about"), ("https://example.com/about", "search"))

    def test_empty_input(self):
        with self.assertRaises(InvalidInputError):
            classify_input("   ")


class TestMediaQueryEngine(unittest.IsolatedAsyncioTestCase):
    """Test cases for the MediaQueryEngine class."""

    async def asyncSetUp(self):
        classify_input.cache_clear()
        self.client = MagicMock(spec=InvidiousClient)
        self.client.instance = "https://invidious.example.org"
        self.client.cache = None
        self.client.api_calls_count = 0
        self.engine = MediaQueryEngine(self.client)

    def test_init_requires_client(self):
        with self.assertRaises(TypeError):
            MediaQueryEngine(object())

    async def test_resolve_video(self):
        self.client.lookup.return_value = descriptor("dQw4w9WgXcQ")

        response = await self.engine.resolve("https://youtu.be/dQw4w9WgXcQ")

        self.client.lookup.assert_awaited_once_with("dQw4w9WgXcQ")
        self.assertEqual(response.kind, "video")
        self.assertEqual([m.id for m in response.items], ["dQw4w9WgXcQ"])
        self.assertIsNone(response.next_page)

    async def test_resolve_playlist(self):
        self.client.lookup_playlist.return_value = [descriptor("A"), descriptor("B")]

        response = await self.engine.resolve("https://www.youtube.com/playlist?list=PLX")

        self.client.lookup_playlist.assert_awaited_once_with("PLX")
        self.assertEqual(response.kind, "playlist")
        self.assertEqual(response.identifier, "PLX")
        self.assertEqual(len(response.items), 2)

    async def test_resolve_search_passes_page(self):
        self.client.search.return_value = SearchPage(next_page=3, results=[descriptor("A")])

        response = await self.engine.resolve("lofi", page=2)

        self.client.search.assert_awaited_once_with("lofi", 2)
        self.assertEqual(response.kind, "search")
        self.assertEqual(response.next_page, 3)

    async def test_failures_are_counted_and_propagated(self):
        self.client.lookup_playlist.side_effect = PlaylistTooLongError(2000)

        with self.assertRaises(PlaylistTooLongError):
            await self.engine.resolve("https://www.youtube.com/playlist?list=PLX")

        stats = await self.engine.get_global_stats()
        self.assertEqual(stats["queries_failed"], 1)
        self.assertEqual(stats["queries_processed"], 0)

    async def test_stats_after_success(self):
        self.client.lookup_playlist.return_value = [descriptor("A"), descriptor("B")]
        self.client.api_calls_count = 4

        await self.engine.resolve("https://www.youtube.com/playlist?list=PLX")
        stats = await self.engine.get_global_stats()

        self.assertEqual(stats["queries_processed"], 1)
        self.assertEqual(stats["items_returned_total"], 2)
        self.assertEqual(stats["api_calls_count"], 4)
        self.assertIn("uptime_seconds", stats)
        self.assertNotIn("metadata_cache", stats)

    async def test_clear_caches(self):
        cache = LRUMetadataCache(maxsize=10, ttl_seconds=60)
        await cache.put(descriptor("A"))
        self.client.cache = cache
        classify_input("lofi")

        results = await self.engine.clear_caches()

        self.assertEqual(results["url_parsing"], "cleared")
        self.assertEqual(results["metadata"], 1)
        self.assertEqual(classify_input.cache_info().currsize, 0)

    async def test_shutdown_closes_client(self):
        await self.engine.shutdown()
        self.client.aclose.assert_awaited_once()


if __name__ == '__main__':
    unittest.main()
