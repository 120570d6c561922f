# File: site_checker/aggregator.py
"""site_checker.aggregator: сводный отчёт одного запуска проверки."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from site_checker.crawler.models import Failure
from site_checker.crawler.session import CrawlSession


@dataclass(slots=True)
class CheckReport:
    """Результат проверки сайта: проверенные URI, предупреждения, ошибки и лишние файлы."""

    site_uri: str
    checked: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    failure: Optional[Dict[str, Any]] = None
    orphans: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["ok"] = self.ok
        return data


def aggregate_results(
    site_uri: str,
    session: CrawlSession,
    failure: Optional[Failure] = None,
    orphans: Sequence[str] = (),
) -> CheckReport:
    """Собирает все части отчёта в CheckReport."""
    return CheckReport(
        site_uri=site_uri,
        checked=list(session.visited),
        warnings=list(session.warnings),
        errors=[e.to_dict() for e in session.errors],
        failure=failure.to_dict() if failure is not None else None,
        orphans=list(orphans),
    )
