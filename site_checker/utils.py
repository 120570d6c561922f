# File: site_checker/utils.py
"""site_checker.utils: Утилитарные функции для чтения списков игнорирования."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Collection, List, Sequence, Union

logger = logging.getLogger("SiteChecker")

__all__: Sequence[str] = (
    "read_ignore_list",
    "remove_duplicates",
)


def read_ignore_list(path: Union[str, Path]) -> List[str]:
    """Читает список игнорируемых сообщений: по одному на строку, пустые строки пропускаются."""
    p = Path(path)
    if not p.exists():
        logger.error("Ignore list not found: %s", p)
        raise FileNotFoundError(f"Ignore list file not found: {p}")
    entries = [line.strip() for line in p.read_text(encoding="utf-8").splitlines() if line.strip()]
    logger.debug("Loaded %d entries from ignore list %s", len(entries), p)
    return entries


def remove_duplicates(items: Collection[str]) -> List[str]:
    """Удаляет дубликаты, сохраняя порядок."""
    unique = list(dict.fromkeys(items))
    removed = len(items) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate entries", removed)
    return unique
