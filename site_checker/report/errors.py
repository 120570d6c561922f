# File: site_checker/report/errors.py
"""site_checker.report.errors: вывод ошибок проверки перед остановкой обхода."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from site_checker.crawler.models import Failure, ValidationError

__all__ = ["ErrorReporter", "format_error"]


def format_error(error: ValidationError) -> str:
    """``<category>: <message> [line L, column C]``"""
    return f"{error} [line {error.line}, column {error.column}]"


class ErrorReporter:
    """Пишет ошибки валидации, итоговую ошибку и список лишних файлов в лог."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("SiteChecker")

    def report(self, uri: str, errors: Sequence[ValidationError], what: str = "markup") -> None:
        self.logger.error("%s has invalid %s (%d errors)", uri, what, len(errors))
        for error in errors:
            self.logger.error("  %s", format_error(error))

    def report_failure(self, failure: Failure) -> None:
        self.logger.error("Check failed: %s", failure.message)

    def report_orphans(self, paths: Iterable[str]) -> None:
        paths = sorted(paths)
        if not paths:
            return
        self.logger.warning("unreferenced files:")
        for path in paths:
            self.logger.warning("\t%s", path)
