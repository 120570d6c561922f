# site_checker/crawler/session.py
"""
Per-run crawl state: visited URIs, schema cache and collected diagnostics.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List

from site_checker.crawler.models import ValidationError
from site_checker.crawler.uri import Origin
from site_checker.parser.schemas import SchemaRegistry

__all__ = ("VisitedSet", "CrawlSession")


class VisitedSet:
    """Normalized URIs already processed. Only ever grows."""

    def __init__(self) -> None:
        # dict keeps insertion order for reporting
        self._uris: Dict[str, None] = {}

    def seen(self, uri: str) -> bool:
        return uri in self._uris

    def mark_seen(self, uri: str) -> None:
        self._uris[uri] = None

    def __contains__(self, uri: object) -> bool:
        return uri in self._uris

    def __len__(self) -> int:
        return len(self._uris)

    def __iter__(self) -> Iterator[str]:
        return iter(self._uris)


@dataclass
class CrawlSession:
    """Everything one crawl owns; a fresh session per run keeps runs independent."""

    origin: Origin
    visited: VisitedSet = field(default_factory=VisitedSet)
    schemas: SchemaRegistry = field(default_factory=SchemaRegistry)
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    referenced: List[str] = field(default_factory=list)

    @classmethod
    def for_site(cls, site_uri: str, schemas: SchemaRegistry | None = None) -> CrawlSession:
        session = cls(origin=Origin.from_uri(site_uri))
        if schemas is not None:
            session.schemas = schemas
        return session

    def warn(self, message: str) -> None:
        self.warnings.append(message)
