#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Metadata cache for mediaquery.

Single-video descriptors can be cached between lookups. The client only
talks to the small `MetadataCache` interface, so any store can be plugged
in; `LRUMetadataCache` is the in-process default.
"""

from typing import Any, Dict, Optional

from config import config
from logging_config import StructuredLogger
from models import MediaDescriptor
from utils import LRUCache

logger = StructuredLogger(__name__)


class MetadataCache:
    """Interface of a descriptor cache.

    Implementations may raise from either method; the client logs such
    failures and carries on as if the cache were absent.
    """

    async def get(self, media_id: str, namespace: str) -> Optional[MediaDescriptor]:
        raise NotImplementedError

    async def put(self, descriptor: MediaDescriptor) -> None:
        raise NotImplementedError


class LRUMetadataCache(MetadataCache):
    """In-memory descriptor cache keyed by (namespace, id), backed by LRUCache."""

    def __init__(self, maxsize: int = config.METADATA_CACHE_SIZE,
                 ttl_seconds: Optional[float] = config.METADATA_CACHE_TTL_SECONDS):
        self._cache = LRUCache(maxsize=maxsize, ttl_seconds=ttl_seconds)

    async def get(self, media_id: str, namespace: str) -> Optional[MediaDescriptor]:
        return await self._cache.get((namespace, media_id))

    async def put(self, descriptor: MediaDescriptor) -> None:
        await self._cache.put((descriptor.type.value, descriptor.id), descriptor)

    async def clear(self) -> int:
        """Drop every cached descriptor and return how many were removed."""
        cleared = await self._cache.clear()
        logger.info(f"Metadata cache cleared ({cleared} entries)", cleared=cleared)
        return cleared

    async def get_stats(self) -> Dict[str, Any]:
        return await self._cache.get_stats()
