#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
General utilities and helper classes for mediaquery.

Includes the asyncio-aware LRU cache backing the metadata cache and a
performance timer used around remote lookups.
"""

import asyncio
import time
from collections import OrderedDict
from contextlib import contextmanager
from typing import Any, Dict, Optional, Tuple

from config import config
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)


# --- Performance Timer ---

@contextmanager
def performance_timer(operation_name: str, threshold_ms: float = 100.0):
    """Context manager for timing operations with threshold-based logging.

    Logs at WARNING when the block takes more than ten times threshold_ms,
    at INFO above threshold_ms, and at DEBUG otherwise. The duration is
    logged even when the block raises.

    Args:
        operation_name: A descriptive name for the operation being timed.
        threshold_ms: Threshold in milliseconds. Defaults to 100ms.
    """
    start_time = time.monotonic()
    try:
        yield
    finally:
        duration_ms = (time.monotonic() - start_time) * 1000
        log_fields = {
            "operation": operation_name,
            "duration_ms": round(duration_ms, 2),
            "threshold_ms": threshold_ms,
        }

        if duration_ms > threshold_ms * 10:
            logger.warning(f"SLOW OPERATION: '{operation_name}' took {duration_ms:.2f}ms", **log_fields)
        elif duration_ms > threshold_ms:
            logger.info(f"Performance watch: '{operation_name}' took {duration_ms:.2f}ms", **log_fields)
        else:
            logger.debug(f"Performance: '{operation_name}' completed in {duration_ms:.2f}ms", **log_fields)


# --- LRU Cache ---

class LRUCache:
    """Async LRU cache whose entries can expire.

    Each entry is stored as (value, expires_at); expires_at is None when the
    cache was built without a TTL. Expired entries are dropped lazily on
    read. When a new key arrives at capacity, `eviction_percent` of the
    capacity is evicted in one go, least recently used first.
    """

    def __init__(self, maxsize: int = 128, ttl_seconds: Optional[float] = None,
                 eviction_percent: int = config.CACHE_EVICTION_PERCENT):
        """Create an empty cache.

        Args:
            maxsize: Capacity in entries, greater than zero.
            ttl_seconds: Lifetime of an entry, or None for no expiry.
            eviction_percent: Share of maxsize (clamped to 1-100) evicted when full.

        Raises:
            ValueError: If maxsize is not positive.
        """
        if maxsize <= 0:
            raise ValueError("LRUCache maxsize must be greater than 0")
        self.maxsize = maxsize
        self.ttl_seconds = ttl_seconds
        percent = max(1, min(int(eviction_percent), 100))
        self._batch = max(1, maxsize * percent // 100)

        self._entries: "OrderedDict[Any, Tuple[Any, Optional[float]]]" = OrderedDict()
        self._lock = asyncio.Lock()
        self._stats = dict.fromkeys(("hits", "misses", "evictions", "ttl_expirations"), 0)
        logger.debug(f"LRUCache created (maxsize={maxsize}, ttl={ttl_seconds}s, batch={self._batch})")

    async def get(self, key: Any) -> Optional[Any]:
        """Value stored under key, or None when absent or expired."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None

            value, expires_at = entry
            if expires_at is not None and time.monotonic() > expires_at:
                del self._entries[key]
                self._stats["ttl_expirations"] += 1
                self._stats["misses"] += 1
                return None

            self._entries.move_to_end(key)
            self._stats["hits"] += 1
            return value

    async def put(self, key: Any, value: Any) -> None:
        """Store value under key as most recently used; restarts its TTL."""
        expires_at = time.monotonic() + self.ttl_seconds if self.ttl_seconds is not None else None
        async with self._lock:
            if key not in self._entries and len(self._entries) >= self.maxsize:
                for _ in range(min(self._batch, len(self._entries))):
                    self._entries.popitem(last=False)
                    self._stats["evictions"] += 1
            self._entries[key] = (value, expires_at)
            self._entries.move_to_end(key)

    async def clear(self) -> int:
        """Drop every entry and return how many there were."""
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    async def get_stats(self) -> Dict[str, Any]:
        """Counters plus size, maxsize, ttl_enabled and hit_ratio."""
        async with self._lock:
            stats: Dict[str, Any] = dict(self._stats)
            lookups = stats["hits"] + stats["misses"]
            stats.update(
                size=len(self._entries),
                maxsize=self.maxsize,
                ttl_enabled=self.ttl_seconds is not None,
                hit_ratio=stats["hits"] / lookups if lookups else 0.0,
            )
            return stats
