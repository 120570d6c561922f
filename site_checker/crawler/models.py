# site_checker/crawler/models.py
"""
Data models for the SiteChecker crawler.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from multidict import CIMultiDict


@dataclass(slots=True, frozen=True)
class Response:
    """Fetched resource: status, case-insensitive headers and raw body."""

    url: str
    status: int
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)
    body: bytes = b""

    @property
    def content_type(self) -> str:
        """Media type without parameters, lower-cased (``""`` when absent)."""
        return self.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()

    @property
    def charset(self) -> Optional[str]:
        for param in self.headers.get("Content-Type", "").split(";")[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() == "charset" and value.strip():
                return value.strip().strip('"').lower()
        return None

    @property
    def location(self) -> Optional[str]:
        value = self.headers.get("Location")
        return value.strip() if value else None

    def text(self) -> str:
        """Decode the body with the declared charset, falling back to UTF-8."""
        try:
            return self.body.decode(self.charset or "utf-8", errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


@dataclass(slots=True, frozen=True)
class ValidationError:
    """One structural problem reported by a parser, linter or schema."""

    message: str
    line: int = 0
    column: int = 0
    category: str = "error"
    source: str = ""

    def __str__(self) -> str:
        return f"{self.category}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"
    BAD_STATUS = "bad_status"
    MARKUP_INVALID = "markup_invalid"
    SCHEMA_INVALID = "schema_invalid"
    TOO_MANY_REDIRECTS = "too_many_redirects"
    UNREACHABLE = "unreachable"


@dataclass(slots=True, frozen=True)
class Failure:
    """Fatal outcome of a check; the first one ends the crawl."""

    kind: FailureKind
    uri: str
    message: str
    status: Optional[int] = None
    errors: Tuple[ValidationError, ...] = ()

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "uri": self.uri,
            "message": self.message,
            "status": self.status,
            "errors": [e.to_dict() for e in self.errors],
        }

    @classmethod
    def not_found(cls, uri: str) -> Failure:
        return cls(FailureKind.NOT_FOUND, uri, f"URI not found: {uri}", status=404)

    @classmethod
    def bad_status(cls, uri: str, status: int, detail: str = "") -> Failure:
        message = f"Bad status: {status} for {uri}"
        if detail:
            message = f"{message} ({detail})"
        return cls(FailureKind.BAD_STATUS, uri, message, status=status)
