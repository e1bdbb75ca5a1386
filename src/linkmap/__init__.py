"""
linkmap

Crawl a site, map the links between sites, and keep track of which site
should be crawled next.
"""

__version__ = "0.1.0"
