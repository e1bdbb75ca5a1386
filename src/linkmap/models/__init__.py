"""
Linkmap Data Models

Pydantic models for crawl and mapping results.
"""

from linkmap.models.reports import CrawlReport, MapReport

__all__ = ["CrawlReport", "MapReport"]
