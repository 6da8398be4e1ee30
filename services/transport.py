#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
HTTP transport for mediaquery.

The Invidious client never touches an HTTP library directly: it hands a URL
and headers to a `Transport` and gets back the status code and raw body.
Retries, TLS and timeouts are the transport's business.
"""

from dataclasses import dataclass
from typing import Dict, Optional

import httpx

from config import config
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    """Status code and undecoded body of one HTTP exchange."""

    status_code: int
    data: str


class Transport:
    """Interface of the request function used by InvidiousClient."""

    async def request(self, url: httpx.URL, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class HttpxTransport(Transport):
    """Transport backed by a shared httpx.AsyncClient."""

    def __init__(self, timeout: float = config.API_TIMEOUT_SECONDS,
                 client: Optional[httpx.AsyncClient] = None):
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._owns_client = client is None

    async def request(self, url: httpx.URL, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        logger.debug(f"GET {url}", url=str(url))
        response = await self._client.get(url, headers=headers or {})
        return HttpResponse(status_code=response.status_code, data=response.text)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
