# File: tests/conftest.py
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import pytest
from multidict import CIMultiDict

from site_checker.config import CheckerConfig
from site_checker.crawler.models import Response

SITE = "https://example.com/"

HTML5_PAGE = (
    "<!DOCTYPE html>\n"
    "<html><head><title>{title}</title></head>"
    "<body>{body}</body></html>"
)

SITEMAP = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
    "{urls}"
    "</urlset>"
)

ATOM_FEED = (
    '<?xml version="1.0" encoding="utf-8"?>\n'
    '<feed xmlns="http://www.w3.org/2005/Atom">'
    "<title>Example</title>"
    "<id>https://example.com/</id>"
    "<updated>2024-01-01T00:00:00Z</updated>"
    '<link href="https://example.com/"/>'
    "<entry><title>Post</title><id>https://example.com/post</id>"
    "<updated>2024-01-01T00:00:00Z</updated></entry>"
    "</feed>"
)


def page(body: str = "", title: str = "Test") -> str:
    """A valid HTML5 document with *body* inside <body>."""
    return HTML5_PAGE.format(title=title, body=body)


def response(
    url: str,
    status: int = 200,
    body: Union[str, bytes] = b"",
    content_type: Optional[str] = "text/html",
    **headers: str,
) -> Response:
    hdrs = CIMultiDict(headers)
    if content_type:
        hdrs["Content-Type"] = content_type
    data = body.encode("utf-8") if isinstance(body, str) else body
    return Response(url=url, status=status, headers=hdrs, body=data)


class FakeFetcher:
    """In-memory fetcher: absolute URL -> Response (or exception); 404 otherwise."""

    def __init__(self, routes: Dict[str, Union[Response, Exception]]) -> None:
        self.routes = routes
        self.calls: List[str] = []
        self.bodies_read: Dict[str, bool] = {}

    async def fetch(self, url: str, *, read_body: bool = True) -> Response:
        self.calls.append(url)
        self.bodies_read[url] = read_body
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return response(url, 404, "not found", "text/plain")
        return route


@pytest.fixture()
def site_config() -> Callable[..., CheckerConfig]:
    """Factory for a CheckerConfig rooted at https://example.com/."""

    def _make(**kwargs) -> CheckerConfig:
        kwargs.setdefault("site_uri", SITE)
        return CheckerConfig(**kwargs)

    return _make


@pytest.fixture()
def site_dir(tmp_path: Path) -> Path:
    """A small local copy of a site with one unreferenced file."""
    root = tmp_path / "public"
    (root / "css").mkdir(parents=True)
    (root / "index.html").write_text(page('<a href="/about">About</a>'), encoding="utf-8")
    (root / "about.html").write_text(page("About"), encoding="utf-8")
    (root / "css" / "site.css").write_text("body { color: red }", encoding="utf-8")
    (root / "unused.html").write_text(page("Unused"), encoding="utf-8")
    (root / ".htaccess").write_text("Options -Indexes", encoding="utf-8")
    return root
