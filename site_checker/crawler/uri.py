# site_checker/crawler/uri.py
"""
URI normalization and classification for SiteChecker.

Normalized URIs are plain strings and serve as keys of the visited set, so
two references to the same resource must normalize to the same text.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

__all__ = ("Origin", "normalize", "is_fetchable", "is_local", "DEFAULT_PORTS")

DEFAULT_PORTS = {"http": 80, "https": 443}
FETCHABLE_SCHEMES = ("", "http", "https")

_PERCENT_RE = re.compile(r"%[0-9a-fA-F]{2}")


@dataclass(slots=True, frozen=True)
class Origin:
    """(scheme, host, port) of the crawl root; ``port`` is always explicit."""

    scheme: str
    host: str
    port: Optional[int]

    @classmethod
    def from_uri(cls, uri: str) -> Origin:
        parts = urlsplit(uri)
        scheme = parts.scheme.lower()
        port = parts.port or DEFAULT_PORTS.get(scheme)
        return cls(scheme, (parts.hostname or "").lower(), port)

    def __str__(self) -> str:
        netloc = _netloc(self.host, self.port, self.scheme)
        return urlunsplit((self.scheme, netloc, "", "", ""))


def _netloc(host: str, port: Optional[int], scheme: str) -> str:
    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        return f"{host}:{port}"
    return host


def _remove_dot_segments(path: str) -> str:
    segments = path.split("/")
    out: List[str] = []
    for seg in segments:
        if seg == "..":
            if len(out) > 1 or (out and out[0] != ""):
                out.pop()
        elif seg != ".":
            out.append(seg)
    if segments[-1] in (".", ".."):
        out.append("")
    return "/".join(out)


def normalize(uri: str, base: Optional[str] = None) -> str:
    """
    Resolve *uri* against *base* and normalize it.

    Lower-cases scheme and host, drops the default port and the fragment,
    removes dot segments and upper-cases percent escapes. The query string is
    kept as is. Raises ValueError for an unparsable port.
    """
    uri = uri.strip()
    if base:
        uri = urljoin(base, uri)
    parts = urlsplit(uri)
    scheme = parts.scheme.lower()
    if scheme not in ("http", "https") and scheme:
        # opaque URIs (mailto:, data:, ...) are only compared, never fetched
        return urlunsplit((scheme, parts.netloc, parts.path, parts.query, ""))

    netloc = parts.netloc
    if netloc:
        netloc = _netloc((parts.hostname or "").lower(), parts.port, scheme)
    path = _remove_dot_segments(parts.path) if parts.path else ""
    if netloc and not path:
        path = "/"
    path = _PERCENT_RE.sub(lambda m: m.group(0).upper(), path)
    return urlunsplit((scheme, netloc, path, parts.query, ""))


def is_fetchable(uri: str) -> bool:
    """True for http(s) URIs and scheme-less references with a sane port."""
    parts = urlsplit(uri)
    if parts.scheme.lower() not in FETCHABLE_SCHEMES:
        return False
    try:
        parts.port
    except ValueError:
        return False
    return True


def is_local(uri: str, origin: Origin) -> bool:
    """True for pure path references and URIs on the crawl origin."""
    parts = urlsplit(uri)
    if not parts.scheme and not parts.netloc:
        return True
    try:
        return Origin.from_uri(uri) == origin
    except ValueError:
        return False
