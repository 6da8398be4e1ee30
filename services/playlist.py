#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Playlist accumulation for mediaquery.

Invidious pages may repeat items across page boundaries, so pages are merged
into a collection keyed by video id instead of being concatenated. The size
used for every limit and termination check is the number of distinct ids.
"""

from typing import Dict, Iterable, List

from models import RawItem


class PlaylistAccumulator:
    """Id-keyed collection of the raw items seen while paging a playlist.

    A later occurrence of an id replaces the stored item but keeps its
    original position, so iteration follows first appearance.
    """

    def __init__(self, limit: int):
        self.limit = limit
        self._items: Dict[str, RawItem] = {}

    def merge(self, items: Iterable[RawItem]) -> int:
        """Merge one page of items.

        Returns:
            int: How many ids this page added that were not seen before.
        """
        before = len(self._items)
        for item in items:
            self._items[item.video_id] = item
        return len(self._items) - before

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, video_id: object) -> bool:
        return video_id in self._items

    def is_over_limit(self) -> bool:
        return len(self._items) >= self.limit

    def should_continue(self, last_page_size: int, declared_count: int) -> bool:
        """Whether another page has to be fetched.

        Stops on an empty page, at the limit, or once the distinct size
        matches the count the playlist declared. The size is the number of
        distinct ids; a page that only repeats known items leaves it
        unchanged.
        """
        size = len(self._items)
        return last_page_size > 0 and size < self.limit and size != declared_count

    def playable_items(self) -> List[RawItem]:
        """Items with a present, non-zero duration, in accumulation order."""
        return [item for item in self._items.values() if item.has_duration]
