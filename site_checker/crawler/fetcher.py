# site_checker/crawler/fetcher.py
"""
Fetcher module: one GET per URI, redirects are returned, never followed.
"""
from __future__ import annotations

import logging
from typing import Protocol

from aiohttp import ClientSession
from multidict import CIMultiDict

from site_checker.crawler.models import Response

logger = logging.getLogger("SiteChecker")


class FetcherProtocol(Protocol):
    async def fetch(self, url: str, *, read_body: bool = True) -> Response: ...


class Fetcher:
    """Performs GET requests on a shared aiohttp session."""

    def __init__(self, session: ClientSession) -> None:
        self.session = session

    async def fetch(self, url: str, *, read_body: bool = True) -> Response:
        """
        Fetch *url* and return its status, headers and (optionally) body.

        Transport errors (``aiohttp.ClientError``, ``asyncio.TimeoutError``)
        propagate to the caller.
        """
        logger.debug("GET %s", url)
        async with self.session.get(url, allow_redirects=False, raise_for_status=False) as resp:
            body = await resp.read() if read_body else b""
            return Response(
                url=url,
                status=resp.status,
                headers=CIMultiDict(resp.headers),
                body=body,
            )
