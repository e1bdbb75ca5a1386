"""
Site Crawler

Walks every HTML page reachable from a root URL on the root's own host and
records every URL it comes across on the way.
"""

import logging
from enum import Enum
from typing import Protocol

from linkmap.core.config import settings
from linkmap.core.errors import (
    FetchError,
    HttpStatusError,
    InvalidUrlError,
    ResolveError,
)
from linkmap.services.fetcher import PageFetcher
from linkmap.utils.parser import LinkExtractor, RegexLinkExtractor
from linkmap.utils.urls import can_be_base, get_host, is_html, resolve

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    def fetch(self, url: str) -> str: ...


class FetchFailurePolicy(str, Enum):
    """What a crawl does when a page cannot be fetched."""

    SKIP = "skip"  # log, remember the URL in get_failed(), keep crawling
    ABORT = "abort"  # re-raise transport and content errors out of crawl()


def default_fetch_policy() -> FetchFailurePolicy:
    if settings.CRAWL_ABORT_ON_FETCH_ERROR:
        return FetchFailurePolicy.ABORT
    return FetchFailurePolicy.SKIP


def _validate_root(url: str) -> str:
    if not can_be_base(url) or get_host(url) is None:
        raise InvalidUrlError(f'invalid url "{url}"')
    try:
        return resolve(url, url)
    except ResolveError as e:
        raise InvalidUrlError(f'invalid url "{url}"') from e


def _resolve_all(page_url: str, raw_links: list[str]) -> list[str]:
    """Resolve a page's raw references, sorted and with duplicates removed."""
    urls = []
    for raw in sorted(set(raw_links)):
        try:
            urls.append(resolve(page_url, raw))
        except ResolveError as e:
            logger.debug(f"Dropping reference: {e}")
    return urls


class PageCrawler:
    """
    Depth-first crawl of a single host.

    The frontier is a stack. A page's references are deduplicated and pushed
    in sorted order, so they are processed in reverse sorted order. Pages on
    other hosts and non-HTML URLs are recorded but never fetched. Each call to crawl() starts from an empty frontier,
    visited set and result list.
    """

    def __init__(
        self,
        url: str,
        fetcher: Fetcher | None = None,
        extractor: LinkExtractor | None = None,
        max_pages: int | None = None,
        max_frontier: int | None = None,
        on_fetch_error: FetchFailurePolicy | None = None,
    ):
        self.url = _validate_root(url)
        self.host = get_host(self.url)
        self.fetcher = fetcher
        self.extractor = extractor or RegexLinkExtractor()
        self.max_pages = max_pages if max_pages is not None else settings.CRAWL_MAX_PAGES
        self.max_frontier = (
            max_frontier if max_frontier is not None else settings.CRAWL_MAX_FRONTIER
        )
        self.on_fetch_error = on_fetch_error or default_fetch_policy()

        self.pages_fetched = 0
        self._links: list[str] = []
        self._edges: list[tuple[str, str]] = []
        self._failed: list[str] = []

    def crawl(self) -> list[str]:
        """
        Crawl from the root URL until the frontier is empty.

        Returns:
            Every URL popped from the frontier, in processing order

        Raises:
            FetchError: only with FetchFailurePolicy.ABORT, never for an HTTP error status
        """
        frontier: list[str] = [self.url]
        visited: set[str] = set()
        self._links = discovered = []
        self._edges = edges = []
        self._failed = failed = []
        self.pages_fetched = 0
        page_cap_hit = False
        dropped = 0

        owned_fetcher = None
        fetcher = self.fetcher
        if fetcher is None:
            owned_fetcher = fetcher = PageFetcher()

        try:
            while frontier:
                current = frontier.pop()

                if current in visited:
                    continue

                discovered.append(current)

                # only expand html pages on the root's host
                if get_host(current) != self.host:
                    continue
                if not is_html(current):
                    continue

                if self.pages_fetched >= self.max_pages:
                    if not page_cap_hit:
                        logger.warning(
                            f"Page limit ({self.max_pages}) reached for {self.url}, "
                            "remaining pages are recorded but not fetched"
                        )
                        page_cap_hit = True
                    continue

                visited.add(current)
                self.pages_fetched += 1
                logger.info(f"Processing {current}")

                try:
                    markup = fetcher.fetch(current)
                except FetchError as e:
                    # error statuses skip the page under either policy
                    if self.on_fetch_error == FetchFailurePolicy.ABORT and not isinstance(
                        e, HttpStatusError
                    ):
                        raise
                    logger.warning(f"Skipping page: {e}")
                    failed.append(current)
                    continue

                for target in _resolve_all(current, self.extractor.extract(markup)):
                    edges.append((current, target))
                    if len(frontier) >= self.max_frontier:
                        dropped += 1
                        continue
                    frontier.append(target)
        finally:
            if owned_fetcher is not None:
                owned_fetcher.close()

        if dropped:
            logger.warning(
                f"Frontier limit ({self.max_frontier}) dropped {dropped} references "
                f"while crawling {self.url}"
            )
        logger.info(
            f"Crawled {self.url}: {self.pages_fetched} pages fetched, "
            f"{len(discovered)} urls discovered, {len(failed)} failed"
        )
        return list(discovered)

    def get_links(self) -> list[str]:
        """URLs from the last crawl, in processing order, not deduplicated."""
        return list(self._links)

    def get_edges(self) -> list[tuple[str, str]]:
        """(page, resolved reference) pairs for every page fetched in the last crawl."""
        return list(self._edges)

    def get_failed(self) -> list[str]:
        return list(self._failed)


def crawl_page(
    url: str,
    fetcher: Fetcher | None = None,
    extractor: LinkExtractor | None = None,
) -> list[str]:
    """
    Fetch a single page and return the resolved URLs it references.

    Raises:
        InvalidUrlError: if ``url`` cannot act as a base
        FetchError: if the page cannot be fetched
    """
    page_url = _validate_root(url)
    extractor = extractor or RegexLinkExtractor()

    if fetcher is None:
        with PageFetcher() as owned_fetcher:
            markup = owned_fetcher.fetch(page_url)
    else:
        markup = fetcher.fetch(page_url)

    return _resolve_all(page_url, extractor.extract(markup))
