#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Invidious API client for mediaquery.

Resolves single videos, search queries and whole playlists against an
Invidious instance and maps the results to MediaDescriptor objects.
Every request goes through `_request`, which turns the instance's status
codes into the exception taxonomy and decodes the JSON body.
"""

import json
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from config import Config
from exceptions import (ForbiddenError, InvalidItemError, MalformedResponseError,
                        NotConfiguredError, PlaylistTooLongError,
                        RateLimitedError, ResourceNotFoundError, UpstreamError)
from models import (MediaDescriptor, MediaSourceType, RawItem,
                    RawPlaylistPage, SearchPage)
from cache_manager import MetadataCache
from services.playlist import PlaylistAccumulator
from services.transport import HttpxTransport, Transport
from utils import performance_timer
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)

PLAYLIST_ITEM_LIMIT = 2000
RAW_BODY_LOG_CHARS = 1000
VIDEO_FIELDS = "videoId,title,lengthSeconds,videoThumbnails,error"


class InvidiousClient:
    """Client for the Invidious v1 API.

    All settings are fixed at construction time; build one client per
    instance you want to talk to.
    """

    def __init__(self, instance: Optional[str] = None,
                 user_agent: Optional[str] = None,
                 cache: Optional[MetadataCache] = None,
                 transport: Optional[Transport] = None,
                 playlist_item_limit: int = PLAYLIST_ITEM_LIMIT,
                 raw_body_log_chars: int = RAW_BODY_LOG_CHARS):
        """Initialize the client.

        Args:
            instance: Base URL of the Invidious instance. Lookups fail with
                NotConfiguredError while this is unset.
            user_agent: Value for the outbound User-Agent header, if any.
            cache: Optional descriptor cache used by `lookup`.
            transport: Request function; defaults to an httpx-based transport.
            playlist_item_limit: Playlists reaching this many items are rejected.
            raw_body_log_chars: How much of an undecodable body to log.
        """
        self.instance = instance or None
        self.user_agent = user_agent or None
        self.cache = cache
        self.transport = transport or HttpxTransport()
        self.playlist_item_limit = playlist_item_limit
        self.raw_body_log_chars = raw_body_log_chars

        self.api_calls_count = 0

    @classmethod
    def from_config(cls, cfg: Config, cache: Optional[MetadataCache] = None,
                    transport: Optional[Transport] = None) -> "InvidiousClient":
        """Build a client from a Config object."""
        return cls(
            instance=cfg.INVIDIOUS_INSTANCE,
            user_agent=cfg.USER_AGENT,
            cache=cache,
            transport=transport or HttpxTransport(timeout=cfg.API_TIMEOUT_SECONDS),
            playlist_item_limit=cfg.PLAYLIST_ITEM_LIMIT,
            raw_body_log_chars=cfg.RAW_BODY_LOG_CHARS,
        )

    async def aclose(self) -> None:
        await self.transport.aclose()

    # --- Request layer ---

    def _build_url(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.URL:
        if not self.instance:
            logger.error("Invidious instance is not configured")
            raise NotConfiguredError()
        url = httpx.URL(self.instance).join(path)
        if params:
            url = url.copy_merge_params(params)
        return url

    @staticmethod
    def _origin(url: httpx.URL) -> str:
        port = f":{url.port}" if url.port else ""
        return f"{url.scheme}://{url.host}{port}"

    async def _request(self, url: httpx.URL) -> Any:
        """Performs one GET against the instance and decodes the JSON body.

        Args:
            url: Fully built request URL.

        Returns:
            The decoded JSON document.

        Raises:
            RateLimitedError: On 429.
            ResourceNotFoundError: On 404.
            ForbiddenError: On 500 (how Invidious reports private content).
            UpstreamError: On any other non-200 status.
            MalformedResponseError: If the body is not valid JSON.
        """
        headers: Dict[str, str] = {}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent

        origin = self._origin(url)
        res = await self.transport.request(url, headers)
        self.api_calls_count += 1

        if res.status_code == 429:
            logger.error("Error calling Invidious API: Too Many Requests", instance=origin)
            raise RateLimitedError(
                f"Error calling Invidious API (instance: {origin}). Try again later or set different instance."
            )
        if res.status_code == 404:
            logger.error("Error video or playlist is unavailable.", url=str(url))
            raise ResourceNotFoundError()
        if res.status_code == 500:
            logger.error("Error video or playlist is private.", url=str(url))
            raise ForbiddenError()
        if res.status_code != 200:
            logger.error(f"Invidious API returned HTTP {res.status_code}", instance=origin, status=res.status_code)
            raise UpstreamError(
                res.status_code,
                f"Error calling Invidious API (instance: {origin}): HTTP {res.status_code}"
            )

        try:
            return json.loads(res.data)
        except (TypeError, ValueError) as e:
            logger.error(
                f"Invidious API returned non-JSON response: {str(res.data)[:self.raw_body_log_chars]}",
                instance=origin
            )
            raise MalformedResponseError(
                f"Error calling Invidious API (instance: {origin}): could not decode response as JSON"
            ) from e

    def _parse_item(self, payload: Any) -> Optional[RawItem]:
        """Validate one raw video object; None stays None for the mapper to reject."""
        if payload is None:
            return None
        if isinstance(payload, dict) and payload.get("error") and "videoId" not in payload:
            # Error documents carry no video fields at all
            logger.error(f"Video contains error: {payload['error']}")
            raise InvalidItemError(f"Video contains error: {payload['error']}")
        try:
            return RawItem.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Unexpected video object from Invidious: {e}", payload=str(payload)[:self.raw_body_log_chars])
            raise MalformedResponseError("Invidious API returned an unexpected video object") from e

    # --- Single video ---

    async def lookup(self, video_id: str) -> MediaDescriptor:
        """Retrieve metadata for a single video.

        The cache is consulted first and updated afterwards. Cache failures
        are logged and never change the outcome of the lookup.

        Args:
            video_id: The video id.

        Returns:
            MediaDescriptor: The mapped video.
        """
        namespace = MediaSourceType.INVIDIOUS.value
        cached: Optional[MediaDescriptor] = None
        if self.cache is not None:
            try:
                cached = await self.cache.get(video_id, namespace)
            except Exception as e:
                logger.error(f"Error retrieving cached metadata for {namespace}:{video_id} - {e}",
                             exc_info=True, video_id=video_id)

        media = cached if cached else await self._lookup_remote(video_id)

        if self.cache is not None:
            try:
                await self.cache.put(media)
            except Exception as e:
                logger.error(f"Error updating cached metadata for {namespace}:{video_id} - {e}",
                             exc_info=True, video_id=video_id)

        return media

    async def _lookup_remote(self, video_id: str) -> MediaDescriptor:
        url = self._build_url(f"/api/v1/videos/{quote(video_id, safe='')}", {"fields": VIDEO_FIELDS})
        payload = await self._request(url)
        return MediaDescriptor.from_raw_item(self._parse_item(payload))

    # --- Search ---

    async def search(self, query: str, page: Union[int, bool, None] = None) -> SearchPage:
        """Search for videos.

        Args:
            query: Search terms. Pre-encoded spaces (%20) are accepted.
            page: Page number to fetch; None or False means the first page.

        Returns:
            SearchPage: The mapped results and the next page number, which is
            False when this page came back empty.
        """
        current_page = page if page else 1
        url = self._build_url("/api/v1/search", {
            "q": query.replace("%20", " "),
            "page": current_page,
            "type": "video",
        })

        result = await self._request(url)
        if not isinstance(result, list):
            logger.error("Invidious search did not return a list", query=query[:100])
            raise MalformedResponseError("Invidious API returned an unexpected search response")

        next_page: Union[int, bool] = current_page + 1
        if not result:
            next_page = False

        return SearchPage(
            next_page=next_page,
            results=[MediaDescriptor.from_raw_item(self._parse_item(video)) for video in result],
        )

    # --- Playlists ---

    async def _fetch_playlist_page(self, playlist_id: str, page: int) -> RawPlaylistPage:
        """Fetches and validates one page of a playlist.

        Raises:
            MalformedResponseError: If the envelope does not look like a playlist page.
            Any error raised by `_request`.
        """
        url = self._build_url(f"/api/v1/playlists/{quote(playlist_id, safe='')}", {"page": page})
        payload = await self._request(url)
        try:
            return RawPlaylistPage.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Unexpected playlist page from Invidious: {e}", playlist_id=playlist_id, page=page)
            raise MalformedResponseError("Invidious API returned an unexpected playlist page") from e

    async def lookup_playlist(self, playlist_id: str) -> List[MediaDescriptor]:
        """Retrieve metadata for every playable item of a playlist.

        Pages are fetched one after another and merged by video id until a
        page comes back empty, the item limit is reached, or the number of
        distinct items equals the count the playlist declares. A playlist
        that reaches the limit is rejected as a whole. Items without a
        duration (private or deleted entries) are dropped.

        Args:
            playlist_id: The playlist id.

        Returns:
            list: MediaDescriptor objects in order of first appearance.

        Raises:
            PlaylistTooLongError: If the playlist declares more items than the
                limit, or reaches the limit while paging.
            Any error raised while fetching a page; no partial result is returned.
        """
        log = logger.bind(playlist_id=playlist_id)
        log.info(f"Looking up YouTube playlist {playlist_id}")

        with performance_timer(f"lookup_playlist:{playlist_id}", threshold_ms=1000.0):
            page = 1
            res = await self._fetch_playlist_page(playlist_id, page)
            declared_count = res.video_count
            if declared_count > self.playlist_item_limit:
                log.warning(f"Rejecting YouTube Playlist {playlist_id} for length {declared_count}",
                            declared_count=declared_count)
                raise PlaylistTooLongError(self.playlist_item_limit)

            accumulator = PlaylistAccumulator(self.playlist_item_limit)
            accumulator.merge(res.videos)

            while accumulator.should_continue(len(res.videos), declared_count):
                page += 1
                log.info(f"Fetching next page of playlist {playlist_id}, have {len(accumulator)} items so far",
                         page=page)
                res = await self._fetch_playlist_page(playlist_id, page)
                new_ids = accumulator.merge(res.videos)
                log.debug(f"Page {page} of playlist {playlist_id} added {new_ids} new items",
                          page=page, page_size=len(res.videos), new_ids=new_ids)

            if accumulator.is_over_limit():
                log.warning(f"Length check failed for playlist {playlist_id}: {len(accumulator)}",
                            item_count=len(accumulator))
                raise PlaylistTooLongError(self.playlist_item_limit)

            media = [MediaDescriptor.from_raw_item(item) for item in accumulator.playable_items()]

        log.info(f"Playlist {playlist_id} resolved to {len(media)} playable items",
                 pages=page, distinct_items=len(accumulator))
        return media
