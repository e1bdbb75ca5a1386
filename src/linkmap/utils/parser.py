"""
Link Extraction

Pulls href/src attribute values out of raw markup with regular expressions.
Matching is purely lexical, so unusual quoting can produce odd or truncated
values; resolution later drops what it cannot use.
"""

import re
from typing import Protocol

HREF_RE = re.compile(r'href="(?P<url>.*?)"')
SRC_RE = re.compile(r'src="(?P<url>.*?)"')


class LinkExtractor(Protocol):
    """Anything that turns markup into a list of raw references."""

    def extract(self, markup: str) -> list[str]: ...


def extract_href_links(markup: str) -> list[str]:
    return [m.group("url") for m in HREF_RE.finditer(markup)]


def extract_src_links(markup: str) -> list[str]:
    return [m.group("url") for m in SRC_RE.finditer(markup)]


def extract_raw_links(markup: str) -> list[str]:
    """
    Extract raw references from markup.

    Returns all href values in document order followed by all src values in
    document order. Nothing is deduplicated.
    """
    return extract_href_links(markup) + extract_src_links(markup)


class RegexLinkExtractor:
    """Default extractor backed by extract_raw_links()."""

    def extract(self, markup: str) -> list[str]:
        return extract_raw_links(markup)
