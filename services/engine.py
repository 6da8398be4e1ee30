#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Resolution engine for mediaquery.

Takes whatever the user typed (a watch URL, a playlist URL, or free text),
works out what it refers to, and dispatches to the matching InvidiousClient
operation.
"""

import functools
import re
import time
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote_plus

from cache_manager import LRUMetadataCache
from exceptions import InvalidInputError
from models import ResolveResponse
from services.invidious import InvidiousClient
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)

URL_PARSE_CACHE_SIZE = 256

# Host-agnostic so that Invidious front-end URLs work as well as youtube.com ones.
URL_PATTERNS = {
    "playlist": re.compile(r"(?:https?://)?[^/\s]+/playlist\?(?:.*&)?list=(?P<identifier>[a-zA-Z0-9_-]+)"),
    "video": re.compile(r"(?:https?://)?[^/\s]+/(?:watch\?(?:.*&)?v=|embed/|shorts/|v/)(?P<identifier>[a-zA-Z0-9_-]{11})"),
    "short_link": re.compile(r"(?:https?://)?(?:www\.)?youtu\.be/(?P<identifier>[a-zA-Z0-9_-]{11})"),
    "search": re.compile(r"(?:https?://)?[^/\s]+/(?:results|search)\?(?:.*&)?(?:search_query|q)=(?P<query>[^&]+)"),
}


@functools.lru_cache(maxsize=URL_PARSE_CACHE_SIZE)
def classify_input(url_or_term: str) -> Tuple[str, str]:
    """Classify user input as a video, a playlist, or a search.

    Args:
        url_or_term: A URL or free-text search term.

    Returns:
        tuple: (identifier_or_query, kind) with kind one of "video",
               "playlist" or "search".

    Raises:
        InvalidInputError: If the input is empty.
    """
    cleaned = (url_or_term or "").strip()
    if not cleaned:
        raise InvalidInputError("Query is required")

    for pattern_name, pattern in URL_PATTERNS.items():
        match = pattern.match(cleaned)
        if not match:
            continue
        groups = match.groupdict()
        if groups.get("query"):
            return unquote_plus(groups["query"]), "search"
        kind = "video" if pattern_name == "short_link" else pattern_name
        logger.debug(f"Matched pattern '{pattern_name}' with identifier '{groups['identifier']}'")
        return groups["identifier"], kind

    if cleaned.startswith(("http://", "https://")):
        logger.warning(f"Unmatched URL treated as search: '{cleaned[:100]}'")
    return cleaned, "search"


class MediaQueryEngine:
    """Dispatches classified input to the Invidious client and keeps stats."""

    def __init__(self, client: InvidiousClient):
        if not isinstance(client, InvidiousClient):
            raise TypeError("client must be an instance of InvidiousClient")
        self.client = client
        self._global_stats = {
            "queries_processed": 0,
            "queries_failed": 0,
            "items_returned_total": 0,
            "engine_start_time": time.monotonic(),
        }

    async def resolve(self, query: str, page: Optional[int] = None) -> ResolveResponse:
        """Resolve free-form input to descriptors.

        Args:
            query: A video URL, playlist URL, or search term.
            page: Search page; ignored for videos and playlists.

        Returns:
            ResolveResponse: The kind of input, its identifier and the items.
        """
        identifier, kind = classify_input(query)
        logger.info(f"Resolving {kind} '{identifier[:100]}'", kind=kind)

        try:
            if kind == "video":
                items = [await self.client.lookup(identifier)]
                response = ResolveResponse(kind=kind, identifier=identifier, items=items)
            elif kind == "playlist":
                items = await self.client.lookup_playlist(identifier)
                response = ResolveResponse(kind=kind, identifier=identifier, items=items)
            else:
                search_page = await self.client.search(identifier, page)
                response = ResolveResponse(kind=kind, identifier=identifier,
                                           items=search_page.results, next_page=search_page.next_page)
        except Exception:
            self._global_stats["queries_failed"] += 1
            raise

        self._global_stats["queries_processed"] += 1
        self._global_stats["items_returned_total"] += len(response.items)
        return response

    async def get_global_stats(self) -> Dict[str, Any]:
        """Statistics for the /health endpoint."""
        stats = {k: v for k, v in self._global_stats.items() if k != "engine_start_time"}
        stats["uptime_seconds"] = round(time.monotonic() - self._global_stats["engine_start_time"], 1)
        stats["api_calls_count"] = self.client.api_calls_count
        stats["url_parsing_cache"] = classify_input.cache_info()._asdict()
        if isinstance(self.client.cache, LRUMetadataCache):
            stats["metadata_cache"] = await self.client.cache.get_stats()
        return stats

    async def clear_caches(self) -> Dict[str, Any]:
        """Clear the URL parsing cache and the metadata cache, if it is ours."""
        results: Dict[str, Any] = {}
        classify_input.cache_clear()
        results["url_parsing"] = "cleared"
        if isinstance(self.client.cache, LRUMetadataCache):
            results["metadata"] = await self.client.cache.clear()
        logger.info("Caches cleared", results=results)
        return results

    async def shutdown(self) -> None:
        await self.client.aclose()
