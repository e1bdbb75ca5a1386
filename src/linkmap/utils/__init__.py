"""
Utilities package initialization
"""

from linkmap.utils.parser import LinkExtractor, RegexLinkExtractor, extract_raw_links
from linkmap.utils import urls

__all__ = ["LinkExtractor", "RegexLinkExtractor", "extract_raw_links", "urls"]
