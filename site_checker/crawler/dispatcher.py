# site_checker/crawler/dispatcher.py
"""
Content dispatch: decide what to do with a successful local response.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from site_checker.crawler.models import Response
from site_checker.parser.markup import MarkupMode

__all__ = ("ContentKind", "Dispatch", "classify", "sniff_markup")

IGNORED_TYPES = ("application/javascript", "text/javascript")
HTML_TYPES = ("text/html",)
XML_TYPES = ("text/xml", "application/xml")

_HTML5_DOCTYPE_RE = re.compile(rb"^<!doctype\s+html\s*>", re.IGNORECASE)
_BOM = b"\xef\xbb\xbf"


class ContentKind(str, Enum):
    MARKUP = "markup"
    CSS = "css"
    IGNORED = "ignored"
    UNKNOWN = "unknown"


@dataclass(slots=True, frozen=True)
class Dispatch:
    kind: ContentKind
    mode: Optional[MarkupMode] = None


def sniff_markup(body: bytes) -> Optional[MarkupMode]:
    """Markup mode implied by the first bytes of *body*, if any."""
    head = body[:1024]
    if head.startswith(_BOM):
        head = head[len(_BOM):]
    head = head.lstrip()
    if head.startswith(b"<?xml"):
        return MarkupMode.XML
    if _HTML5_DOCTYPE_RE.match(head):
        return MarkupMode.HTML5
    return None


def classify(response: Response) -> Dispatch:
    """
    Route *response* by declared media type.

    Images and scripts are discarded without looking at the body. For
    everything else a leading ``<?xml`` or ``<!DOCTYPE html>`` wins over the
    declared type.
    """
    ctype = response.content_type
    if ctype.startswith("image/") or ctype in IGNORED_TYPES:
        return Dispatch(ContentKind.IGNORED)
    if ctype == "text/css":
        return Dispatch(ContentKind.CSS)

    sniffed = sniff_markup(response.body)
    if sniffed is not None:
        return Dispatch(ContentKind.MARKUP, sniffed)
    if ctype in HTML_TYPES:
        return Dispatch(ContentKind.MARKUP, MarkupMode.HTML)
    if ctype in XML_TYPES or (ctype.startswith("application/") and ctype.endswith("+xml")):
        return Dispatch(ContentKind.MARKUP, MarkupMode.XML)
    return Dispatch(ContentKind.UNKNOWN)
