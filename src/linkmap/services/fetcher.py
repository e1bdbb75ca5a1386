"""
Page Fetcher

Blocking HTTP GET of a single page, returning its markup as text.
"""

import logging

import httpx

from linkmap.core.config import settings
from linkmap.core.errors import FetchError, HttpStatusError

logger = logging.getLogger(__name__)

TEXT_CONTENT_MARKERS = ("text/", "xml", "json")


def _is_text(content_type: str) -> bool:
    return any(marker in content_type for marker in TEXT_CONTENT_MARKERS)


class PageFetcher:
    """
    One GET per page, no retries.

    Owns an httpx.Client; close it with close() or use the fetcher as a
    context manager.
    """

    def __init__(
        self,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            headers={"User-Agent": user_agent or settings.CRAWL_USER_AGENT},
            timeout=timeout if timeout is not None else settings.CRAWL_TIMEOUT_SEC,
            follow_redirects=True,
            transport=transport,
        )

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def fetch(self, url: str) -> str:
        """
        Fetch ``url`` and return the response body as text.

        Raises:
            HttpStatusError: on an HTTP error status
            FetchError: on transport errors or a non-text Content-Type
        """
        try:
            resp = self._client.get(url)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise FetchError(url, str(e) or type(e).__name__) from e

        if resp.status_code >= 400:
            raise HttpStatusError(url, resp.status_code)

        ct = resp.headers.get("Content-Type", "").lower()
        if ct and not _is_text(ct):
            raise FetchError(url, f"non-text content type '{ct}'")

        logger.debug(f"Fetched {url} ({resp.status_code}, {len(resp.content)} bytes)")
        return resp.text
