"""
Site Mapper

Crawls tracked sites oldest first and records which other sites each one
links to.
"""

import logging
import sqlite3
import time
from typing import Callable, Iterable

from linkmap.core.config import settings
from linkmap.core.errors import InvalidUrlError
from linkmap.crawler import Fetcher, PageCrawler
from linkmap.db.link_graph import (
    LinkEntry,
    SiteEntry,
    add_site,
    delete_links_by_source,
    get_site_with_oldest_crawltime,
    update_site_crawltime,
    upsert_link,
)
from linkmap.models.reports import MapReport
from linkmap.utils.urls import is_absolute, is_in_domain, is_in_site, site_root

logger = logging.getLogger(__name__)


class SiteMapper:
    """
    Link graph maintenance on top of PageCrawler.

    Only sites whose host ends with ``domain_suffix`` are linked to and
    tracked. An empty suffix tracks every host.
    """

    def __init__(
        self,
        con: sqlite3.Connection,
        domain_suffix: str | None = None,
        fetcher: Fetcher | None = None,
        crawler_factory: Callable[..., PageCrawler] = PageCrawler,
        clock: Callable[[], float] = time.time,
    ):
        self.con = con
        self.domain_suffix = (
            domain_suffix if domain_suffix is not None else settings.DOMAIN_SUFFIX
        )
        self.fetcher = fetcher
        self.crawler_factory = crawler_factory
        self.clock = clock

    def seed(self, urls: Iterable[str]) -> int:
        """
        Start tracking the sites of ``urls`` as never crawled.

        Already tracked sites keep their crawltime.

        Returns:
            Number of new sites
        """
        added = 0
        for url in urls:
            if not is_absolute(url):
                raise InvalidUrlError(f'invalid seed url "{url}"')
            if add_site(self.con, SiteEntry(url=site_root(url), crawltime=0)):
                added += 1
        logger.info(f"Seeded {added} new sites")
        return added

    def _linked_sites(self, site: SiteEntry, urls: Iterable[str]) -> list[str]:
        roots = set()
        for url in urls:
            if is_in_site(url, site.url):
                continue
            if not is_in_domain(url, self.domain_suffix):
                continue
            roots.add(site_root(url))
        return sorted(roots)

    def map_site(self, site: SiteEntry) -> MapReport:
        """
        Crawl ``site`` and replace its outgoing links.

        If the crawl raises, the stored links and crawltime are left as they were.
        """
        logger.info(f"Mapping {site.url} (last crawled {site.crawltime})")
        crawler = self.crawler_factory(site.url, fetcher=self.fetcher)
        discovered = crawler.crawl()
        # edges hold every reference, including those the frontier cap dropped
        linked = self._linked_sites(site, [dst for _, dst in crawler.get_edges()])

        delete_links_by_source(self.con, site.url)
        new_sites = []
        for dst in linked:
            upsert_link(self.con, LinkEntry(srcurl=site.url, dsturl=dst))
            if add_site(self.con, SiteEntry(url=dst, crawltime=0)):
                new_sites.append(dst)

        crawltime = int(self.clock())
        update_site_crawltime(self.con, SiteEntry(url=site.url, crawltime=crawltime))

        logger.info(
            f"Mapped {site.url}: {len(linked)} linked sites, {len(new_sites)} new"
        )
        return MapReport(
            site=site.url,
            crawltime=crawltime,
            pages_fetched=crawler.pages_fetched,
            urls_discovered=len(discovered),
            linked_sites=linked,
            new_sites=new_sites,
            failed=crawler.get_failed(),
        )

    def map_next(self) -> MapReport | None:
        """Map the least recently crawled site, or return None if nothing is tracked."""
        site = get_site_with_oldest_crawltime(self.con)
        if site is None:
            return None
        return self.map_site(site)

    def run(self, rounds: int) -> list[MapReport]:
        reports = []
        for _ in range(rounds):
            report = self.map_next()
            if report is None:
                logger.info("No sites to map")
                break
            reports.append(report)
        return reports
