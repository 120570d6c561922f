# File: site_checker/report/__init__.py
"""site_checker.report: вывод ошибок и JSON-отчёт, используемые движком и CLI."""

from site_checker.report.errors import ErrorReporter, format_error
from site_checker.report.json_report import render_json

__all__ = ["ErrorReporter", "format_error", "render_json"]
