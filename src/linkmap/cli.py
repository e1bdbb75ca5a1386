"""
Command Line Interface

Usage:
    linkmap links [-r] [-d SUFFIX] [-H] [--no-images] [--json] URL [URL ...]
    linkmap map [--db PATH] [-d SUFFIX] [--rounds N] [--seed URL ...] [--json]
    linkmap sites [--db PATH] [--stats]
"""

import argparse
import json
import logging
import sys
from contextlib import contextmanager
from typing import Iterable, Iterator

from linkmap.core.config import settings
from linkmap.core.errors import LinkmapError
from linkmap.crawler import Fetcher, PageCrawler, crawl_page
from linkmap.db.link_graph import connect, count_links, list_sites
from linkmap.models.reports import CrawlReport
from linkmap.services.fetcher import PageFetcher
from linkmap.services.mapper import SiteMapper
from linkmap.utils.urls import is_html, is_image, is_in_domain

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@contextmanager
def _fetcher_scope(fetcher: Fetcher | None) -> Iterator[Fetcher]:
    if fetcher is not None:
        yield fetcher
        return
    with PageFetcher() as owned:
        yield owned


def filter_links(
    links: Iterable[str],
    domain: str = "",
    html_only: bool = False,
    no_images: bool = False,
) -> list[str]:
    """Sort, deduplicate and filter links for output."""
    result = []
    for link in sorted(set(links)):
        if not is_in_domain(link, domain):
            continue
        if html_only and not is_html(link):
            continue
        if no_images and is_image(link):
            continue
        result.append(link)
    return result


def run_links(args: argparse.Namespace, fetcher: Fetcher | None = None) -> CrawlReport:
    links: list[str] = []
    failed: list[str] = []
    pages_fetched = 0

    with _fetcher_scope(fetcher) as active:
        for url in args.urls:
            if args.recursive:
                crawler = PageCrawler(url, fetcher=active)
                links.extend(crawler.crawl())
                failed.extend(crawler.get_failed())
                pages_fetched += crawler.pages_fetched
            else:
                links.extend(crawl_page(url, fetcher=active))
                pages_fetched += 1

    return CrawlReport(
        roots=list(args.urls),
        recursive=args.recursive,
        links=filter_links(links, args.domain, args.html_only, args.no_images),
        pages_fetched=pages_fetched,
        failed=failed,
    )


def cmd_links(args: argparse.Namespace, fetcher: Fetcher | None = None) -> int:
    report = run_links(args, fetcher)
    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        for link in report.links:
            print(link)
    return 0


def cmd_map(args: argparse.Namespace, fetcher: Fetcher | None = None) -> int:
    with connect(args.db) as con, _fetcher_scope(fetcher) as active:
        mapper = SiteMapper(con, domain_suffix=args.domain, fetcher=active)
        if args.seed:
            mapper.seed(args.seed)
        reports = mapper.run(args.rounds)

    if args.json:
        print(json.dumps([r.model_dump() for r in reports], indent=2))
    else:
        for report in reports:
            print(
                f"{report.site}\t{len(report.linked_sites)} linked"
                f"\t{len(report.new_sites)} new\t{report.pages_fetched} pages"
            )
    return 0


def cmd_sites(args: argparse.Namespace) -> int:
    with connect(args.db) as con:
        sites = list_sites(con)
        if args.stats:
            print(f"sites\t{len(sites)}")
            print(f"links\t{count_links(con)}")
            return 0
        for site in sites:
            print(f"{site.crawltime}\t{site.url}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkmap", description="Crawl sites and map the links between them"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=settings.LOG_LEVEL,
        help="Log level",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{settings.APP_NAME} {settings.APP_VERSION}",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    links = sub.add_parser("links", help="List links found on pages")
    links.add_argument("urls", nargs="+", metavar="URL", help="Page(s) to start from")
    links.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Follow HTML pages on the same host",
    )
    links.add_argument(
        "-d",
        "--domain",
        default=settings.DOMAIN_SUFFIX,
        help="Only output links whose host ends with this suffix (e.g. .neocities.org)",
    )
    links.add_argument(
        "-H", "--html-only", action="store_true", help="Only output HTML pages"
    )
    links.add_argument("--no-images", action="store_true", help="Skip image links")
    links.add_argument("--json", action="store_true", help="Print a JSON report")

    map_parser = sub.add_parser("map", help="Crawl the least recently crawled sites")
    map_parser.add_argument("--db", default=settings.DB_PATH, help="Path to link graph")
    map_parser.add_argument(
        "-d",
        "--domain",
        default=settings.DOMAIN_SUFFIX,
        help="Only track sites whose host ends with this suffix",
    )
    map_parser.add_argument(
        "--rounds", type=int, default=1, help="Number of sites to crawl"
    )
    map_parser.add_argument(
        "--seed",
        action="append",
        default=[],
        metavar="URL",
        help="Start tracking the site of URL (repeatable)",
    )
    map_parser.add_argument("--json", action="store_true", help="Print JSON reports")

    sites = sub.add_parser("sites", help="List tracked sites, oldest crawl first")
    sites.add_argument("--db", default=settings.DB_PATH, help="Path to link graph")
    sites.add_argument(
        "--stats", action="store_true", help="Print site and link counts instead"
    )

    return parser


def main(argv: list[str] | None = None, fetcher: Fetcher | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else args.log_level.upper()
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        if args.command == "links":
            return cmd_links(args, fetcher)
        if args.command == "map":
            return cmd_map(args, fetcher)
        return cmd_sites(args)
    except LinkmapError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
