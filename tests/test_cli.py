"""
CLI Tests

Tests for the linkmap command line entry point.
"""

import json

import pytest

from linkmap.cli import build_parser, filter_links, main

ROOT = "https://home.neocities.org/"

PAGES = {
    ROOT: (
        '<a href="/blog">blog</a>'
        '<a href="https://friend.neocities.org/">friend</a>'
        '<a href="https://friend.neocities.org/">friend again</a>'
        '<a href="https://example.com/">elsewhere</a>'
        '<img src="/me.png">'
        '<link href="/style.css">'
    ),
    "https://home.neocities.org/blog": '<a href="https://pal.neocities.org/x.html">pal</a>',
}


def _lines(capsys):
    return capsys.readouterr().out.splitlines()


def test_filter_links_sorts_and_dedups():
    links = ["https://b.example/", "https://a.example/", "https://b.example/"]
    assert filter_links(links) == ["https://a.example/", "https://b.example/"]


def test_filter_links_filters():
    links = [
        "https://x.neocities.org/a.png",
        "https://x.neocities.org/page",
        "https://example.com/",
    ]
    assert filter_links(links, domain=".neocities.org") == links[:2]
    assert filter_links(links, html_only=True) == [
        "https://example.com/",
        "https://x.neocities.org/page",
    ]
    assert filter_links(links, no_images=True) == [
        "https://example.com/",
        "https://x.neocities.org/page",
    ]


def test_links_single_page(capsys, make_fetcher):
    fetcher = make_fetcher(PAGES)
    assert main(["links", ROOT], fetcher=fetcher) == 0
    assert _lines(capsys) == [
        "https://example.com/",
        "https://friend.neocities.org/",
        "https://home.neocities.org/blog",
        "https://home.neocities.org/me.png",
        "https://home.neocities.org/style.css",
    ]
    assert fetcher.calls == [ROOT]


def test_links_recursive_with_filters(capsys, make_fetcher):
    fetcher = make_fetcher(PAGES)
    code = main(
        ["links", "-r", "-d", ".neocities.org", "--html-only", ROOT], fetcher=fetcher
    )
    assert code == 0
    assert _lines(capsys) == [
        "https://friend.neocities.org/",
        "https://home.neocities.org/",
        "https://home.neocities.org/blog",
        "https://pal.neocities.org/x.html",
    ]


def test_links_no_images(capsys, make_fetcher):
    main(["links", "--no-images", ROOT], fetcher=make_fetcher(PAGES))
    assert "https://home.neocities.org/me.png" not in _lines(capsys)


def test_links_accumulates_all_urls(capsys, make_fetcher):
    other = "https://other.neocities.org/"
    pages = dict(PAGES)
    pages[other] = '<a href="/only-here">x</a>'
    main(["links", "-H", ROOT, other], fetcher=make_fetcher(pages))
    lines = _lines(capsys)
    assert "https://other.neocities.org/only-here" in lines
    assert "https://home.neocities.org/blog" in lines


def test_links_json(capsys, make_fetcher):
    main(["links", "-r", "--json", ROOT], fetcher=make_fetcher(PAGES))
    report = json.loads(capsys.readouterr().out)
    assert report["roots"] == [ROOT]
    assert report["recursive"] is True
    assert report["pages_fetched"] == 2
    assert report["failed"] == []
    assert "https://pal.neocities.org/x.html" in report["links"]


def test_links_fetch_error_exit_code(capsys, make_fetcher):
    assert main(["links", ROOT], fetcher=make_fetcher({})) == 1
    assert capsys.readouterr().out == ""


def test_links_invalid_url_exit_code(make_fetcher):
    assert main(["links", "not-a-url"], fetcher=make_fetcher({})) == 1


def test_map_and_sites(capsys, make_fetcher, test_db_path):
    fetcher = make_fetcher(PAGES)
    code = main(
        [
            "map",
            "--db",
            test_db_path,
            "-d",
            ".neocities.org",
            "--seed",
            ROOT,
            "--json",
        ],
        fetcher=fetcher,
    )
    assert code == 0
    reports = json.loads(capsys.readouterr().out)
    assert len(reports) == 1
    assert reports[0]["site"] == ROOT
    assert reports[0]["linked_sites"] == [
        "https://friend.neocities.org/",
        "https://pal.neocities.org/",
    ]

    assert main(["sites", "--db", test_db_path]) == 0
    lines = _lines(capsys)
    assert len(lines) == 3
    assert lines[-1].endswith(f"\t{ROOT}")
    assert lines[0].startswith("0\t")


def test_map_empty_store(capsys, make_fetcher, test_db_path):
    assert main(["map", "--db", test_db_path], fetcher=make_fetcher({})) == 0
    assert capsys.readouterr().out == ""


def test_command_required():
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args([])
    assert exc_info.value.code == 2


def test_sites_stats(capsys, make_fetcher, test_db_path):
    main(
        ["map", "--db", test_db_path, "-d", ".neocities.org", "--seed", ROOT],
        fetcher=make_fetcher(PAGES),
    )
    capsys.readouterr()

    assert main(["sites", "--db", test_db_path, "--stats"]) == 0
    assert _lines(capsys) == ["sites\t3", "links\t2"]


def test_invalid_log_level_rejected():
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["--log-level", "bogus", "sites"])
    assert exc_info.value.code == 2


def test_log_level_case_insensitive():
    args = build_parser().parse_args(["--log-level", "debug", "sites"])
    assert args.log_level == "DEBUG"


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["--version"])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.strip() == "linkmap 0.1.0"
