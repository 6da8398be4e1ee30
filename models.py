#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Pydantic models for mediaquery: the raw Invidious envelopes, the media
descriptors handed to callers, and the HTTP API request/response bodies.
"""

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from exceptions import InvalidItemError
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)

DEFAULT_THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/0.jpg"


class MediaSourceType(str, Enum):
    """Where a descriptor came from. Also used as the cache namespace."""

    INVIDIOUS = "invidious"


# --- Raw Invidious envelopes ---

class VideoThumbnail(BaseModel):
    """One entry of an item's `videoThumbnails` list."""

    model_config = ConfigDict(extra="ignore")

    url: str
    width: int = 0


class RawItem(BaseModel):
    """A video as returned by the videos, search and playlists endpoints.

    `lengthSeconds` is absent for private or deleted entries embedded in a
    playlist; `error` is set when the instance reports a problem with the
    video itself.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    video_id: str = Field(..., alias="videoId")
    title: str = ""
    length_seconds: Optional[int] = Field(None, alias="lengthSeconds")
    video_thumbnails: List[VideoThumbnail] = Field(default_factory=list, alias="videoThumbnails")
    error: Optional[str] = None

    @field_validator("video_thumbnails", mode="before")
    @classmethod
    def none_thumbnails_to_empty(cls, v):
        return [] if v is None else v

    @property
    def has_duration(self) -> bool:
        """True if the item carries a present, non-zero duration."""
        return bool(self.length_seconds)


class RawPlaylistPage(BaseModel):
    """One page of the `/api/v1/playlists/{id}` endpoint."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    video_count: int = Field(0, alias="videoCount")
    videos: List[RawItem] = Field(default_factory=list)

    @field_validator("videos", mode="before")
    @classmethod
    def none_videos_to_empty(cls, v):
        return [] if v is None else v


# --- Media descriptors ---

class MediaMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    thumbnail: str


class MediaDescriptor(BaseModel):
    """Immutable description of one playable video.

    Built only through `from_raw_item`, which applies the thumbnail selection
    and error checks.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: MediaSourceType = MediaSourceType.INVIDIOUS
    title: str
    duration: int
    meta: MediaMeta

    @classmethod
    def from_raw_item(cls, item: Optional[RawItem]) -> "MediaDescriptor":
        """Create a descriptor from a raw Invidious item.

        The widest thumbnail variant wins (the first one on ties). Without any
        variants a default URL is derived from the video id.

        Args:
            item: The raw item, or None if the instance returned nothing.

        Returns:
            MediaDescriptor: The mapped descriptor.

        Raises:
            InvalidItemError: If the item is missing or carries an error field.
        """
        if item is None:
            logger.error("Cannot map a missing video")
            raise InvalidItemError("Video is null")
        if item.error:
            logger.error(f"Video {item.video_id} contains error: {item.error}", video_id=item.video_id)
            raise InvalidItemError(f"Video contains error: {item.error}")

        thumbnail = DEFAULT_THUMBNAIL_URL.format(video_id=item.video_id)
        if item.video_thumbnails:
            best = item.video_thumbnails[0]
            max_width = 0
            for candidate in item.video_thumbnails:
                if candidate.width > max_width:
                    max_width = candidate.width
                    best = candidate
            thumbnail = best.url

        return cls(
            id=item.video_id,
            title=item.title,
            duration=item.length_seconds or 0,
            meta=MediaMeta(thumbnail=thumbnail),
        )


class SearchPage(BaseModel):
    """One page of search results.

    `nextPage` is the page number to ask for next, or False once the
    instance returns an empty page.
    """

    model_config = ConfigDict(populate_by_name=True)

    next_page: Union[int, Literal[False]] = Field(..., alias="nextPage")
    results: List[MediaDescriptor] = Field(default_factory=list)


# --- HTTP API models ---

class ResolveRequest(BaseModel):
    """Body of POST /api/resolve."""

    query: str = Field(
        ...,
        description="Video URL, playlist URL, or free-text search."
    )
    page: Optional[int] = Field(
        None,
        description="Search page to fetch (ignored for videos and playlists).",
        ge=1
    )

    @field_validator("query")
    @classmethod
    def query_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Query is required")
        cleaned = v.strip()
        if len(cleaned) > 1000:
            raise ValueError("Query too long (max 1000 characters)")
        return cleaned


class ResolveResponse(BaseModel):
    """Result of POST /api/resolve."""

    kind: Literal["video", "playlist", "search"]
    identifier: str
    items: List[MediaDescriptor] = Field(default_factory=list)
    next_page: Union[int, Literal[False], None] = Field(
        None,
        description="Next search page, only set for searches."
    )


class ErrorResponse(BaseModel):
    """Model for error responses."""

    detail: str = Field(..., description="Detailed error message.")
    error_code: Optional[str] = Field(None, description="Optional internal error code.")

