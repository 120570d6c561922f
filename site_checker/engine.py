# File: site_checker/engine.py
"""site_checker.engine: Orchestration layer для запуска проверки и сборки отчёта."""

from __future__ import annotations

import asyncio
from typing import Optional

from site_checker.aggregator import CheckReport, aggregate_results
from site_checker.config import CheckerConfig, load_config
from site_checker.crawler.crawler import SiteChecker
from site_checker.logger import logger
from site_checker.orphans import find_orphans
from site_checker.report.errors import ErrorReporter

__all__ = ["Engine", "start_check"]


async def start_check(cfg: CheckerConfig) -> CheckReport:
    """
    Запускает проверку сайта и возвращает CheckReport.

    Отчёт о лишних файлах строится только после успешного обхода и только
    если в конфиге задан site_dir.
    """
    reporter = ErrorReporter(logger)
    async with SiteChecker(cfg, reporter=reporter) as checker:
        failure = await checker.run()

    orphans: list[str] = []
    if failure is None and cfg.site_dir is not None:
        root_path = cfg.site_uri.path or "/"
        orphans = find_orphans(
            cfg.site_dir,
            checker.session.referenced,
            exclude=cfg.orphan_exclude,
            root_path=root_path if root_path.endswith("/") else root_path + "/",
        )
        reporter.report_orphans(orphans)
    return aggregate_results(checker.site_uri, checker.session, failure, orphans)


class Engine:
    """Фасад для CLI и тестов: загрузка конфига, запуск проверки, отчёт."""

    @staticmethod
    def load_config(path: Optional[str]) -> CheckerConfig:
        """Загружает конфиг из YAML/JSON."""
        return load_config(path)

    def __init__(self, config: CheckerConfig) -> None:
        self.config = config

    def start_check(self, timeout: Optional[float] = None) -> CheckReport:
        """Синхронный запуск проверки; timeout ограничивает весь обход (секунд)."""
        logger.info("Starting check…")
        try:
            return asyncio.run(asyncio.wait_for(start_check(self.config), timeout=timeout))
        except asyncio.TimeoutError:
            logger.error("Check did not finish within %s seconds", timeout)
            raise
        except Exception as exc:
            logger.error("Check failed: %s", exc)
            raise
