"""
Page Fetcher Tests

Tests for PageFetcher against an in-process httpx transport.
"""

import httpx
import pytest

from linkmap.core.errors import FetchError, HttpStatusError
from linkmap.services.fetcher import PageFetcher


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/page.html":
        return httpx.Response(
            200,
            headers={"Content-Type": "text/html; charset=utf-8"},
            text='<a href="/next.html">next</a>',
        )
    if path == "/plain":
        return httpx.Response(200, content=b"no content type")
    if path == "/feed.xml":
        return httpx.Response(
            200, headers={"Content-Type": "application/xhtml+xml"}, text="<html/>"
        )
    if path == "/pic.png":
        return httpx.Response(
            200, headers={"Content-Type": "image/png"}, content=b"\x89PNG\r\n"
        )
    if path == "/old":
        return httpx.Response(301, headers={"Location": "/page.html"})
    if path == "/agent":
        return httpx.Response(
            200,
            headers={"Content-Type": "text/plain"},
            text=request.headers["User-Agent"],
        )
    if path == "/down":
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.Response(404, headers={"Content-Type": "text/html"}, text="missing")


@pytest.fixture
def fetcher():
    with PageFetcher(
        user_agent="linkmap-test", transport=httpx.MockTransport(_handler)
    ) as f:
        yield f


def test_fetch_html(fetcher):
    assert fetcher.fetch("https://a.example/page.html") == '<a href="/next.html">next</a>'


def test_fetch_without_content_type(fetcher):
    assert fetcher.fetch("https://a.example/plain") == "no content type"


def test_fetch_xml_is_text(fetcher):
    assert fetcher.fetch("https://a.example/feed.xml") == "<html/>"


def test_fetch_follows_redirects(fetcher):
    assert "next.html" in fetcher.fetch("https://a.example/old")


def test_fetch_sends_user_agent(fetcher):
    assert fetcher.fetch("https://a.example/agent") == "linkmap-test"


def test_binary_body_is_error(fetcher):
    with pytest.raises(FetchError) as exc_info:
        fetcher.fetch("https://a.example/pic.png")
    assert exc_info.value.url == "https://a.example/pic.png"
    assert "image/png" in str(exc_info.value)


def test_http_error_status_is_error(fetcher):
    with pytest.raises(HttpStatusError, match="HTTP 404") as exc_info:
        fetcher.fetch("https://a.example/missing.html")
    assert exc_info.value.status_code == 404
    assert isinstance(exc_info.value, FetchError)


def test_transport_error_is_error(fetcher):
    with pytest.raises(FetchError) as exc_info:
        fetcher.fetch("https://a.example/down")
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_close_on_exit():
    f = PageFetcher(transport=httpx.MockTransport(_handler))
    with f:
        pass
    assert f._client.is_closed
