# === FILE: site_checker/parser/markup.py ===
"""Strict markup validation for SiteChecker.

The checker never repairs a document: it feeds the body to a parser in one of
three modes and takes the parser's verdict.

* ``xml``: :mod:`lxml` XML parser, no recovery, no network access.
* ``html``: :mod:`lxml` HTML parser; everything in its error log counts.
* ``html5``: :mod:`html5lib` with HTML5 parsing rules, used for documents
  that start with ``<!DOCTYPE html>``.

Links (``href``/``src`` attribute values, document order) and the XML root
name are only extracted from documents without errors.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple, Union

import html5lib
from html5lib.constants import E as HTML5_MESSAGES
from lxml import etree

from site_checker.crawler.models import ValidationError

__all__: Sequence[str] = ("MarkupMode", "ParsedMarkup", "parse_markup", "filter_ignored")

LINK_ATTRIBUTES = ("href", "src")
EMPTY_DOCUMENT = "Document is empty"


class MarkupMode(str, Enum):
    XML = "xml"
    HTML = "html"
    HTML5 = "html5"


@dataclass(slots=True)
class ParsedMarkup:
    """Parser verdict for one document."""

    errors: list[ValidationError] = field(default_factory=list)
    links: list[str] = field(default_factory=list)
    root_name: Optional[str] = None
    document: Any = None

    @property
    def ok(self) -> bool:
        return not self.errors


def filter_ignored(errors: Iterable[ValidationError], ignore: Iterable[str]) -> list[ValidationError]:
    """Drop errors whose message is an exact entry of *ignore*."""
    ignored = set(ignore)
    return [e for e in errors if e.message not in ignored]


def _link_values(elements: Iterable[Any]) -> list[str]:
    links: list[str] = []
    for el in elements:
        if not isinstance(el.tag, str):
            # comments, processing instructions
            continue
        for name, value in el.attrib.items():
            if name in LINK_ATTRIBUTES:
                links.append(str(value))
    return links


def _log_errors(error_log: Any, source: str) -> list[ValidationError]:
    return [
        ValidationError(
            message=entry.message.strip(),
            line=entry.line,
            column=entry.column,
            category=entry.level_name.lower(),
            source=source,
        )
        for entry in error_log
    ]


def _as_bytes(body: Union[str, bytes]) -> bytes:
    return body.encode("utf-8") if isinstance(body, str) else body


def _as_text(body: Union[str, bytes]) -> str:
    return body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body


def _parse_xml(body: Union[str, bytes]) -> Tuple[list[ValidationError], Any]:
    parser = etree.XMLParser(recover=False, no_network=True, resolve_entities=False)
    try:
        root = etree.fromstring(_as_bytes(body), parser)
    except etree.XMLSyntaxError as exc:
        errors = _log_errors(exc.error_log, "xml") or [
            ValidationError(str(exc), *(exc.position or (0, 0)), source="xml")
        ]
        return errors, None
    return _log_errors(parser.error_log, "xml"), root


def _parse_html(body: Union[str, bytes]) -> Tuple[list[ValidationError], Any]:
    parser = etree.HTMLParser(recover=True, no_network=True)
    try:
        root = etree.fromstring(_as_text(body), parser)
    except (etree.XMLSyntaxError, etree.ParserError) as exc:
        return [ValidationError(str(exc) or EMPTY_DOCUMENT, source="html")], None
    return _log_errors(parser.error_log, "html"), root


def _html5_message(code: str, datavars: Any) -> str:
    template = HTML5_MESSAGES.get(code, code)
    try:
        return template % (datavars or {})
    except (KeyError, TypeError, ValueError):
        return template


def _parse_html5(body: Union[str, bytes]) -> Tuple[list[ValidationError], Any]:
    parser = html5lib.HTMLParser(strict=False, namespaceHTMLElements=False)
    root = parser.parse(_as_text(body))
    errors = [
        ValidationError(
            message=_html5_message(code, datavars),
            line=pos[0] if pos else 0,
            column=pos[1] if pos else 0,
            source="html5",
        )
        for pos, code, datavars in parser.errors
    ]
    return errors, root


_PARSERS = {
    MarkupMode.XML: _parse_xml,
    MarkupMode.HTML: _parse_html,
    MarkupMode.HTML5: _parse_html5,
}


def parse_markup(
    body: Union[str, bytes], mode: MarkupMode, ignore: Iterable[str] = ()
) -> ParsedMarkup:
    """Parse *body* strictly in *mode* and return errors or extracted links.

    Parameters
    ----------
    body
        Raw document. XML is best passed as ``bytes`` so that its encoding
        declaration is honoured; text is encoded as UTF-8.
    mode
        One of :class:`MarkupMode`.
    ignore
        Exact messages that do not count as errors. Filtering happens before
        the verdict, so a document with only ignorable errors is valid.
    """
    mode = MarkupMode(mode)
    errors, root = _PARSERS[mode](body)
    errors = filter_ignored(errors, ignore)
    if errors:
        return ParsedMarkup(errors=errors)
    if root is None:
        return ParsedMarkup(errors=[ValidationError(EMPTY_DOCUMENT, source=mode.value)])

    if mode is MarkupMode.HTML5:
        return ParsedMarkup(links=_link_values(root.iter()), document=root)
    return ParsedMarkup(
        links=_link_values(root.iter()),
        root_name=etree.QName(root).localname if mode is MarkupMode.XML else None,
        document=root.getroottree(),
    )
