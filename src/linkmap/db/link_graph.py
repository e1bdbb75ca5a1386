"""
Link Graph Store

SQLite tables for tracked sites and the links between them.

Every operation takes an open connection as its first argument. Use
connect() to get one that is closed again on every exit path.
"""

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from linkmap.core.config import settings
from linkmap.core.errors import (
    IntegrityViolation,
    InvalidUrlError,
    RowCountError,
    StoreError,
)
from linkmap.utils.urls import is_absolute

logger = logging.getLogger(__name__)

# Tables are only created when missing. An existing table with a different
# layout is used as-is.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS site (
  url TEXT NOT NULL PRIMARY KEY,
  crawltime INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_site_crawltime ON site(crawltime);

CREATE TABLE IF NOT EXISTS link (
  srcurl TEXT NOT NULL,
  dsturl TEXT NOT NULL,
  PRIMARY KEY (srcurl, dsturl),
  FOREIGN KEY (srcurl) REFERENCES site (url)
    ON UPDATE CASCADE
    ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_link_dsturl ON link(dsturl);
"""


@dataclass(frozen=True)
class SiteEntry:
    """
    A tracked site.

    ``url`` is the base url of the site (e.g. "https://example.neocities.org/").
    ``crawltime`` is the unix timestamp of the last crawl, 0 if never crawled.
    """

    url: str
    crawltime: int = 0

    def __post_init__(self):
        if not is_absolute(self.url):
            raise InvalidUrlError(f'invalid url "{self.url}"')


@dataclass(frozen=True)
class LinkEntry:
    """A link from the site at ``srcurl`` to ``dsturl``."""

    srcurl: str
    dsturl: str

    def __post_init__(self):
        if not is_absolute(self.srcurl):
            raise InvalidUrlError(f'invalid source url "{self.srcurl}"')
        if not is_absolute(self.dsturl):
            raise InvalidUrlError(f'invalid destination url "{self.dsturl}"')


def open_db(path: str = settings.DB_PATH) -> sqlite3.Connection:
    """Open the store and create its tables if needed."""
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    try:
        con = sqlite3.connect(path)
    except sqlite3.Error as e:
        raise StoreError(f"failed to open {path}: {e}") from e

    try:
        # Off by default in SQLite; the link cascade depends on it
        con.execute("PRAGMA foreign_keys = ON")
        con.executescript(SCHEMA_SQL)
    except sqlite3.Error as e:
        con.close()
        raise StoreError(f"failed to initialize {path}: {e}") from e
    return con


@contextmanager
def connect(path: str = settings.DB_PATH) -> Iterator[sqlite3.Connection]:
    con = open_db(path)
    try:
        yield con
    finally:
        con.close()


def ensure_db(path: str = settings.DB_PATH) -> None:
    """Ensure database file exists with correct schema."""
    con = open_db(path)
    con.close()


def _write(con: sqlite3.Connection, sql: str, params: tuple[Any, ...]) -> int:
    try:
        cur = con.execute(sql, params)
        con.commit()
        return cur.rowcount
    except sqlite3.IntegrityError as e:
        con.rollback()
        raise IntegrityViolation(str(e)) from e
    except sqlite3.Error as e:
        con.rollback()
        raise StoreError(str(e)) from e


def _read(con: sqlite3.Connection, sql: str, params: tuple[Any, ...] = ()) -> list:
    try:
        return con.execute(sql, params).fetchall()
    except sqlite3.Error as e:
        raise StoreError(str(e)) from e


def upsert_site(con: sqlite3.Connection, site: SiteEntry) -> None:
    """Insert a site, or update its crawltime if the url already exists."""
    _write(
        con,
        """
        INSERT INTO site (url, crawltime) VALUES (?, ?)
        ON CONFLICT(url) DO UPDATE SET crawltime = excluded.crawltime
        """,
        (site.url, site.crawltime),
    )


def add_site(con: sqlite3.Connection, site: SiteEntry) -> bool:
    """
    Insert a site unless it is already tracked.

    Returns:
        True if a new row was added
    """
    added = _write(
        con,
        "INSERT INTO site (url, crawltime) VALUES (?, ?) ON CONFLICT(url) DO NOTHING",
        (site.url, site.crawltime),
    )
    return added > 0


def upsert_link(con: sqlite3.Connection, link: LinkEntry) -> None:
    """
    Record a link. Recording the same link twice leaves one row.

    Raises:
        IntegrityViolation: if the source site is not tracked
    """
    _write(
        con,
        """
        INSERT INTO link (srcurl, dsturl) VALUES (?, ?)
        ON CONFLICT(srcurl, dsturl) DO UPDATE
        SET srcurl = excluded.srcurl, dsturl = excluded.dsturl
        """,
        (link.srcurl, link.dsturl),
    )


def delete_site_by_url(con: sqlite3.Connection, url: str) -> int:
    """Delete a site and, through the foreign key, every link it is the source of."""
    return _write(con, "DELETE FROM site WHERE url = ?", (url,))


def delete_links_by_source(con: sqlite3.Connection, url: str) -> int:
    return _write(con, "DELETE FROM link WHERE srcurl = ?", (url,))


def get_site(con: sqlite3.Connection, url: str) -> SiteEntry | None:
    rows = _read(con, "SELECT url, crawltime FROM site WHERE url = ?", (url,))
    if not rows:
        return None
    return SiteEntry(url=rows[0][0], crawltime=rows[0][1])


def list_sites(con: sqlite3.Connection) -> list[SiteEntry]:
    """All sites, least recently crawled first."""
    rows = _read(con, "SELECT url, crawltime FROM site ORDER BY crawltime ASC, url ASC")
    return [SiteEntry(url=url, crawltime=crawltime) for url, crawltime in rows]


def get_site_with_oldest_crawltime(con: sqlite3.Connection) -> SiteEntry | None:
    """Return the site crawled longest ago (ties in no particular order), or None."""
    rows = _read(
        con, "SELECT url, crawltime FROM site ORDER BY crawltime ASC LIMIT 1"
    )
    if not rows:
        return None
    return SiteEntry(url=rows[0][0], crawltime=rows[0][1])


def update_site_crawltime(con: sqlite3.Connection, site: SiteEntry) -> None:
    """
    Set the crawltime of an existing site.

    Raises:
        RowCountError: if the update did not change exactly one row
    """
    try:
        cur = con.execute(
            "UPDATE site SET crawltime = ? WHERE url = ?", (site.crawltime, site.url)
        )
    except sqlite3.Error as e:
        con.rollback()
        raise StoreError(str(e)) from e

    if cur.rowcount != 1:
        con.rollback()
        raise RowCountError("update_site_crawltime", expected=1, actual=cur.rowcount)
    con.commit()


def get_links_by_source(con: sqlite3.Connection, url: str) -> list[LinkEntry]:
    rows = _read(
        con,
        "SELECT srcurl, dsturl FROM link WHERE srcurl = ? ORDER BY dsturl",
        (url,),
    )
    return [LinkEntry(srcurl=src, dsturl=dst) for src, dst in rows]


def count_links(con: sqlite3.Connection) -> int:
    return _read(con, "SELECT COUNT(*) FROM link")[0][0]
