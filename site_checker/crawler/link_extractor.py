# site_checker/crawler/link_extractor.py
"""
Stylesheet reference extraction for SiteChecker.

Best effort: a regular expression scan, not a CSS parser. Malformed
``url()`` tokens are skipped silently.
"""
from __future__ import annotations

import re
from typing import List

__all__ = ("extract_css_links",)

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_REFERENCE_RE = re.compile(
    r"""\burl\(\s*(?:"([^"]*)"|'([^']*)'|([^'"()\s]+))\s*\)"""
    r"""|@import\s+(?:"([^"]*)"|'([^']*)')""",
    re.IGNORECASE,
)


def extract_css_links(css: str) -> List[str]:
    """
    Return references found in *css*, in order of occurrence.

    Handles ``url("x")``, ``url('x')``, ``url(x)`` and ``@import "x"``.
    References are returned unresolved.
    """
    css = _COMMENT_RE.sub("", css)
    links: List[str] = []
    for match in _REFERENCE_RE.finditer(css):
        ref = next((g for g in match.groups() if g is not None), "").strip()
        if ref:
            links.append(ref)
    return links
