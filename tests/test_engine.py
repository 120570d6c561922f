# File: tests/test_engine.py
"""Свойства обхода SiteChecker на подставном fetcher (без сети)."""
from __future__ import annotations

import aiohttp
import pytest
from conftest import ATOM_FEED, SITE, SITEMAP, FakeFetcher, page, response

from site_checker.crawler.crawler import SiteChecker
from site_checker.crawler.models import FailureKind, ValidationError
from site_checker.parser.schemas import SchemaRegistry


# --------------------------------------------------------------------------- #
#                               Helper utilities                              #
# --------------------------------------------------------------------------- #


class StubLinter:
    """Returns the same findings for every document."""

    def __init__(self, messages):
        self.messages = messages
        self.calls = 0

    async def lint(self, html):
        self.calls += 1
        return [ValidationError(m, 1, 1, "warning", "tidy") for m in self.messages]


async def run(config, routes, **kwargs):
    fetcher = FakeFetcher(routes)
    checker = SiteChecker(config, fetcher=fetcher, **kwargs)
    failure = await checker.run()
    return checker, fetcher, failure


# --------------------------------------------------------------------------- #
#                                   Tests                                     #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_example_scenario_aborts_on_missing_local_page(site_config):
    routes = {
        SITE: response(
            SITE,
            body=page('<a href="/about">About</a><img src="http://cdn.other.com/logo.png">'),
        ),
    }
    checker, fetcher, failure = await run(site_config(), routes)

    assert failure is not None
    assert failure.kind is FailureKind.NOT_FOUND
    assert failure.message == "URI not found: https://example.com/about"
    # document order: /about fails before the logo is reached
    assert fetcher.calls == [SITE, "https://example.com/about"]


@pytest.mark.asyncio()
async def test_valid_site_passes(site_config):
    routes = {
        SITE: response(
            SITE,
            body=page('<a href="/about">About</a><img src="http://cdn.other.com/logo.png">'),
        ),
        "https://example.com/about": response("https://example.com/about", body=page("About")),
        "http://cdn.other.com/logo.png": response("http://cdn.other.com/logo.png", content_type="image/png"),
    }
    checker, fetcher, failure = await run(site_config(), routes)

    assert failure is None
    assert fetcher.calls == [SITE, "https://example.com/about", "http://cdn.other.com/logo.png"]
    assert checker.session.referenced == [SITE, "https://example.com/about"]


@pytest.mark.asyncio()
async def test_equivalent_uris_are_fetched_once(site_config):
    links = (
        '<a href="/a">1</a><a href="/a#top">2</a><a href="./a">3</a>'
        '<a href="HTTPS://EXAMPLE.COM:443/a">4</a><a href="/b/../a">5</a>'
    )
    routes = {
        SITE: response(SITE, body=page(links)),
        "https://example.com/a": response("https://example.com/a", body=page('<a href="/">home</a>')),
    }
    checker, fetcher, failure = await run(site_config(), routes)

    assert failure is None
    assert fetcher.calls.count("https://example.com/a") == 1
    assert fetcher.calls.count(SITE) == 1


@pytest.mark.asyncio()
async def test_redirect_chain_dispatches_final_target_once(site_config):
    routes = {
        SITE: response(SITE, body=page('<a href="/a">A</a>')),
        "https://example.com/a": response("https://example.com/a", 301, content_type=None, Location="/b"),
        "https://example.com/b": response(
            "https://example.com/b", 302, content_type=None, Location="https://example.com/c"
        ),
        "https://example.com/c": response(
            "https://example.com/c", body=page('<a href="/a">A</a><a href="/b">B</a>')
        ),
    }
    checker, fetcher, failure = await run(site_config(), routes)

    assert failure is None
    assert fetcher.calls == [SITE, "https://example.com/a", "https://example.com/b", "https://example.com/c"]
    assert checker.session.referenced == [SITE, "https://example.com/c"]
    assert "https://example.com/a" in checker.session.visited
    assert "https://example.com/b" in checker.session.visited


@pytest.mark.asyncio()
async def test_redirect_cycle_fails(site_config):
    routes = {
        SITE: response(SITE, body=page('<a href="/x">X</a>')),
        "https://example.com/x": response("https://example.com/x", 302, content_type=None, Location="/y"),
        "https://example.com/y": response("https://example.com/y", 302, content_type=None, Location="/x"),
    }
    _, fetcher, failure = await run(site_config(), routes)

    assert failure is not None
    assert failure.kind is FailureKind.TOO_MANY_REDIRECTS
    assert failure.message == "Redirect loop: https://example.com/x"
    assert fetcher.calls == [SITE, "https://example.com/x", "https://example.com/y"]


@pytest.mark.asyncio()
async def test_self_redirect_fails(site_config):
    routes = {
        SITE: response(SITE, body=page('<a href="/loop">L</a>')),
        "https://example.com/loop": response("https://example.com/loop", 301, content_type=None, Location="/loop"),
    }
    _, fetcher, failure = await run(site_config(), routes)

    assert failure.kind is FailureKind.TOO_MANY_REDIRECTS
    assert failure.uri == "https://example.com/loop"
    assert fetcher.calls.count("https://example.com/loop") == 1


@pytest.mark.asyncio()
async def test_foreign_redirect_loop_with_warn_policy(site_config):
    foreign = "http://other.example.org/spin"
    routes = {
        SITE: response(SITE, body=page(f'<a href="{foreign}">O</a><a href="/next">N</a>')),
        foreign: response(foreign, 302, content_type=None, Location=foreign),
        "https://example.com/next": response("https://example.com/next", body=page()),
    }
    checker, fetcher, failure = await run(site_config(external_links="warn"), routes)

    assert failure is None
    assert checker.session.warnings == [f"Redirect loop: {foreign}"]
    assert "https://example.com/next" in fetcher.calls


@pytest.mark.asyncio()
async def test_redirect_hop_cap(site_config):
    routes = {SITE: response(SITE, body=page('<a href="/r0">R</a>'))}
    for i in range(5):
        url = f"https://example.com/r{i}"
        routes[url] = response(url, 307, content_type=None, Location=f"/r{i + 1}")
    _, fetcher, failure = await run(site_config(max_redirects=2), routes)

    assert failure is not None
    assert failure.kind is FailureKind.TOO_MANY_REDIRECTS
    assert failure.uri == "https://example.com/r3"
    assert "https://example.com/r3" not in fetcher.calls


@pytest.mark.asyncio()
async def test_redirect_without_location_is_bad_status(site_config):
    routes = {SITE: response(SITE, 302, content_type=None)}
    _, _, failure = await run(site_config(), routes)

    assert failure.kind is FailureKind.BAD_STATUS
    assert failure.status == 302


@pytest.mark.asyncio()
async def test_server_error_is_bad_status(site_config):
    routes = {
        SITE: response(SITE, body=page('<a href="/boom">B</a><a href="/after">A</a>')),
        "https://example.com/boom": response("https://example.com/boom", 500, "oops", "text/plain"),
        "https://example.com/after": response("https://example.com/after", body=page()),
    }
    _, fetcher, failure = await run(site_config(), routes)

    assert failure.kind is FailureKind.BAD_STATUS
    assert "500" in failure.message
    assert "https://example.com/boom" in failure.message
    assert "https://example.com/after" not in fetcher.calls


@pytest.mark.asyncio()
async def test_dead_external_link_aborts_by_default(site_config):
    routes = {
        SITE: response(SITE, body=page('<a href="http://gone.example.org/x">X</a><a href="/later">L</a>')),
        "https://example.com/later": response("https://example.com/later", body=page()),
    }
    _, fetcher, failure = await run(site_config(), routes)

    assert failure.kind is FailureKind.NOT_FOUND
    assert failure.uri == "http://gone.example.org/x"
    assert fetcher.calls == [SITE, "http://gone.example.org/x"]


@pytest.mark.asyncio()
async def test_dead_external_link_with_warn_policy(site_config):
    routes = {
        SITE: response(SITE, body=page('<a href="http://gone.example.org/x">X</a><a href="/later">L</a>')),
        "https://example.com/later": response("https://example.com/later", body=page()),
    }
    checker, fetcher, failure = await run(site_config(external_links="warn"), routes)

    assert failure is None
    assert "https://example.com/later" in fetcher.calls
    assert checker.session.warnings == ["URI not found: http://gone.example.org/x"]


@pytest.mark.asyncio()
async def test_external_links_ignored_are_not_fetched(site_config):
    routes = {SITE: response(SITE, body=page('<a href="http://other.example.org/">O</a>'))}
    _, fetcher, failure = await run(site_config(external_links="ignore"), routes)

    assert failure is None
    assert fetcher.calls == [SITE]


@pytest.mark.asyncio()
async def test_foreign_pages_are_not_parsed_or_followed(site_config):
    foreign = "http://other.example.org/page"
    routes = {
        SITE: response(SITE, body=page(f'<a href="{foreign}">O</a>')),
        # invalid markup with links: must be neither parsed nor followed
        foreign: response(foreign, body='<p><a href="https://example.com/secret">s</a></div>'),
    }
    checker, fetcher, failure = await run(site_config(), routes)

    assert failure is None
    assert fetcher.calls == [SITE, foreign]
    assert fetcher.bodies_read == {SITE: True, foreign: False}
    assert checker.session.referenced == [SITE]


@pytest.mark.asyncio()
async def test_unreachable_host_fails(site_config):
    routes = {
        SITE: response(SITE, body=page('<img src="/img.png">')),
        "https://example.com/img.png": aiohttp.ClientConnectionError("connection refused"),
    }
    _, _, failure = await run(site_config(), routes)

    assert failure.kind is FailureKind.UNREACHABLE
    assert failure.uri == "https://example.com/img.png"


@pytest.mark.asyncio()
@pytest.mark.parametrize("content_type", ["image/png", "image/svg+xml", "application/javascript"])
async def test_ignored_types_are_never_validated(site_config, content_type):
    asset = "https://example.com/asset"
    routes = {
        SITE: response(SITE, body=page(f'<script src="{asset}"></script>')),
        asset: response(asset, body='<?xml version="1.0"?><broken><a href="/x"></broken>', content_type=content_type),
    }
    checker, fetcher, failure = await run(site_config(), routes)

    assert failure is None
    assert fetcher.calls == [SITE, asset]
    assert checker.session.warnings == []


@pytest.mark.asyncio()
async def test_non_fetchable_links_are_skipped(site_config):
    body = (
        '<a href="mailto:me@example.com">m</a><a href="javascript:void(0)">j</a>'
        '<img src="data:image/png;base64,AAAA"><a href="ftp://example.com/f">f</a>'
    )
    routes = {SITE: response(SITE, body=page(body))}
    _, fetcher, failure = await run(site_config(), routes)

    assert failure is None
    assert fetcher.calls == [SITE]


@pytest.mark.asyncio()
async def test_unknown_content_type_warns_and_continues(site_config):
    routes = {
        SITE: response(SITE, body=page('<a href="/notes.txt">n</a><a href="/next">n</a>')),
        "https://example.com/notes.txt": response("https://example.com/notes.txt", body="hello", content_type="text/plain"),
        "https://example.com/next": response("https://example.com/next", body=page()),
    }
    checker, fetcher, failure = await run(site_config(), routes)

    assert failure is None
    assert "https://example.com/next" in fetcher.calls
    assert checker.session.warnings == [
        "skipping unknown resource type: https://example.com/notes.txt (text/plain)"
    ]


@pytest.mark.asyncio()
async def test_css_references_are_resolved_against_stylesheet(site_config):
    css_url = "https://example.com/css/site.css"
    css = 'a { background: url("a.png") } b { background: url(\'b.png\') } i { background: url(c.png) }'
    routes = {
        SITE: response(SITE, body=page('<link rel="stylesheet" href="/css/site.css">')),
        css_url: response(css_url, body=css, content_type="text/css"),
    }
    for name in ("a", "b", "c"):
        url = f"https://example.com/css/{name}.png"
        routes[url] = response(url, content_type="image/png")
    _, fetcher, failure = await run(site_config(), routes)

    assert failure is None
    assert fetcher.calls == [
        SITE,
        css_url,
        "https://example.com/css/a.png",
        "https://example.com/css/b.png",
        "https://example.com/css/c.png",
    ]


@pytest.mark.asyncio()
async def test_invalid_markup_is_fatal_and_reported(site_config):
    routes = {
        SITE: response(SITE, body=page('<a href="/feed.xml">f</a><a href="/after">a</a>')),
        "https://example.com/feed.xml": response(
            "https://example.com/feed.xml", body="<?xml version='1.0'?><feed><entry></feed>", content_type="application/xml"
        ),
    }
    checker, fetcher, failure = await run(site_config(), routes)

    assert failure.kind is FailureKind.MARKUP_INVALID
    assert failure.uri == "https://example.com/feed.xml"
    assert failure.errors
    assert checker.session.errors == list(failure.errors)
    assert "https://example.com/after" not in fetcher.calls


@pytest.mark.asyncio()
async def test_lint_findings_on_ignore_list_are_not_errors(site_config):
    linter = StubLinter(['<img> lacks "alt" attribute', "trimming empty <p>"])
    routes = {
        SITE: response(SITE, body=page('<a href="/next">n</a>')),
        "https://example.com/next": response("https://example.com/next", body=page()),
    }
    _, fetcher, failure = await run(site_config(), routes, linter=linter)

    assert failure is None
    assert linter.calls == 2
    assert "https://example.com/next" in fetcher.calls


@pytest.mark.asyncio()
async def test_lint_findings_outside_ignore_list_are_fatal(site_config):
    linter = StubLinter(['<img> lacks "alt" attribute', "missing </div>"])
    routes = {SITE: response(SITE, body=page())}
    _, _, failure = await run(site_config(), routes, linter=linter)

    assert failure.kind is FailureKind.MARKUP_INVALID
    assert failure.message == f"HTML parsing failed (via Tidy): {SITE}"
    assert [e.message for e in failure.errors] == ["missing </div>"]


@pytest.mark.asyncio()
async def test_schema_compiled_once_per_file(site_config, monkeypatch):
    compiled = []
    real_compile = SchemaRegistry._compile

    def counting(path):
        compiled.append(path.name)
        return real_compile(path)

    monkeypatch.setattr(SchemaRegistry, "_compile", staticmethod(counting))
    sitemap = SITEMAP.format(urls="<url><loc>https://example.com/</loc></url>")
    links = '<a href="/sitemap.xml">1</a><a href="/sitemap2.xml">2</a><a href="/feed.xml">3</a><a href="/feed2.xml">4</a>'
    routes = {SITE: response(SITE, body=page(links))}
    for name, body in (("sitemap", sitemap), ("sitemap2", sitemap), ("feed", ATOM_FEED), ("feed2", ATOM_FEED)):
        url = f"https://example.com/{name}.xml"
        routes[url] = response(url, body=body, content_type="application/xml")
    checker, _, failure = await run(site_config(), routes)

    assert failure is None
    assert sorted(compiled) == ["atom.xsd", "sitemap.xsd"]
    assert len(checker.session.schemas) == 2


@pytest.mark.asyncio()
async def test_schema_violation_is_fatal(site_config):
    sitemap = SITEMAP.format(urls="<url><lastmod>2024-01-01</lastmod></url>")
    routes = {
        SITE: response(SITE, body=page('<a href="/sitemap.xml">s</a>')),
        "https://example.com/sitemap.xml": response(
            "https://example.com/sitemap.xml", body=sitemap, content_type="text/xml"
        ),
    }
    checker, _, failure = await run(site_config(), routes)

    assert failure.kind is FailureKind.SCHEMA_INVALID
    assert failure.message == "XML validation failed: https://example.com/sitemap.xml"
    assert all(e.source == "schema" for e in failure.errors)


@pytest.mark.asyncio()
async def test_unmapped_xml_root_is_not_schema_checked(site_config):
    rss = '<?xml version="1.0"?><rss version="2.0"><channel><title>t</title></channel></rss>'
    routes = {
        SITE: response(SITE, body=page('<a href="/rss.xml">r</a>')),
        "https://example.com/rss.xml": response("https://example.com/rss.xml", body=rss, content_type="application/rss+xml"),
    }
    checker, _, failure = await run(site_config(), routes)

    assert failure is None
    assert len(checker.session.schemas) == 0


@pytest.mark.asyncio()
async def test_sitemap_locations_are_followed(site_config):
    sitemap = SITEMAP.format(urls="<url><loc>https://example.com/listed</loc></url>")
    routes = {
        SITE: response(SITE, body=page('<a href="/sitemap.xml">s</a>')),
        "https://example.com/sitemap.xml": response("https://example.com/sitemap.xml", body=sitemap, content_type="text/xml"),
        "https://example.com/listed": response("https://example.com/listed", body=page()),
    }
    _, fetcher, failure = await run(site_config(), routes)
    assert failure is None
    assert fetcher.calls[-1] == "https://example.com/listed"

    _, fetcher, failure = await run(site_config(follow_sitemap=False), routes)
    assert failure is None
    assert "https://example.com/listed" not in fetcher.calls


@pytest.mark.asyncio()
async def test_sessions_do_not_share_state(site_config):
    routes = {SITE: response(SITE, body=page())}
    first, _, _ = await run(site_config(), routes)
    second, fetcher, failure = await run(site_config(), routes)

    assert failure is None
    assert fetcher.calls == [SITE]
    assert first.session is not second.session
    assert list(first.session.visited) == list(second.session.visited) == [SITE]
