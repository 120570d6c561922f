# site_checker/report/json_report.py

"""
JSON-отчёт SiteChecker: CheckReport.to_dict() в файл.
"""
import json
from pathlib import Path

from site_checker.aggregator import CheckReport


def render_json(report: CheckReport, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Записывает report в output_path (родительские папки создаются) и возвращает Path.

    ``pretty=False`` пишет JSON одной строкой, удобно для CI-артефактов.
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(
        json.dumps(report.to_dict(), ensure_ascii=False, indent=2 if pretty else None),
        encoding="utf-8",
    )
    return output
