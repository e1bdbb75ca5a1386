"""
Test configuration and fixtures for linkmap tests
"""

import os

# Set ENVIRONMENT before importing any modules that read settings
os.environ.setdefault("ENVIRONMENT", "test")

import pytest

from linkmap.core.errors import FetchError, HttpStatusError


class FakeFetcher:
    """Serves canned markup and records every URL it was asked for."""

    def __init__(self, pages: dict[str, str], failing: set[str] | None = None):
        self.pages = pages
        self.failing = failing or set()
        self.calls: list[str] = []

    def fetch(self, url: str) -> str:
        self.calls.append(url)
        if url in self.failing:
            raise FetchError(url, "connection refused")
        if url not in self.pages:
            raise HttpStatusError(url, 404)
        return self.pages[url]


@pytest.fixture
def make_fetcher():
    """Factory for FakeFetcher instances"""
    return FakeFetcher


@pytest.fixture
def test_db_path(tmp_path):
    """Provide a temporary database path."""
    return str(tmp_path / "linkmap.db")


@pytest.fixture
def con(test_db_path):
    """Open link graph connection on a temporary database"""
    from linkmap.db.link_graph import open_db

    connection = open_db(test_db_path)
    yield connection
    connection.close()
