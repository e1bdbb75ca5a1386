"""
Report Models

Summaries of a crawl run or a site mapping, serializable to JSON.
"""

from pydantic import BaseModel, Field


class CrawlReport(BaseModel):
    """Links found from one or more starting URLs"""

    roots: list[str] = Field(..., description="URLs the crawl started from")
    recursive: bool = Field(
        default=False, description="Whether same-host pages were followed"
    )
    links: list[str] = Field(
        default_factory=list, description="Sorted, deduplicated, filtered links"
    )
    pages_fetched: int = Field(default=0, ge=0)
    failed: list[str] = Field(
        default_factory=list, description="Pages that could not be fetched"
    )


class MapReport(BaseModel):
    """Outcome of mapping one tracked site"""

    site: str = Field(..., description="Site root that was crawled")
    crawltime: int = Field(..., ge=0, description="New crawltime (unix seconds)")
    pages_fetched: int = Field(default=0, ge=0)
    urls_discovered: int = Field(default=0, ge=0)
    linked_sites: list[str] = Field(
        default_factory=list, description="Sites this site now links to"
    )
    new_sites: list[str] = Field(
        default_factory=list, description="Linked sites that were not tracked before"
    )
    failed: list[str] = Field(default_factory=list)
