# File: site_checker/parser/schemas.py
"""site_checker.parser.schemas: XML Schema registry keyed by document root element."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from lxml import etree

from site_checker.crawler.models import ValidationError

__all__ = ["SCHEMAS_DIR", "BUILTIN_SCHEMAS", "SchemaRegistry"]

logger = logging.getLogger("SiteChecker")

SCHEMAS_DIR = Path(__file__).resolve().parent.parent / "schemas"
SCHEMA_SUFFIX = ".xsd"
BUILTIN_SCHEMAS: Dict[str, str] = {
    "feed": "atom",
    "urlset": "sitemap",
    "sitemapindex": "siteindex",
}


class SchemaRegistry:
    """Compiles each schema file once per crawl and hands out the cached handle.

    Root names without a mapping are not validated.
    """

    def __init__(
        self,
        schemas_dir: Union[str, Path, None] = None,
        extra: Optional[Mapping[str, Union[str, Path]]] = None,
    ) -> None:
        base = Path(schemas_dir) if schemas_dir is not None else SCHEMAS_DIR
        self._files: Dict[str, Path] = {
            root: base / f"{stem}{SCHEMA_SUFFIX}" for root, stem in BUILTIN_SCHEMAS.items()
        }
        for root, path in (extra or {}).items():
            self._files[root] = Path(path).expanduser()
        self._cache: Dict[Path, etree.XMLSchema] = {}

    def __contains__(self, root_name: object) -> bool:
        return root_name in self._files

    def __len__(self) -> int:
        """Number of compiled schemas."""
        return len(self._cache)

    def schema_file(self, root_name: str) -> Optional[Path]:
        return self._files.get(root_name)

    def schema_for(self, root_name: str) -> Optional[etree.XMLSchema]:
        path = self._files.get(root_name)
        if path is None:
            return None
        key = path.resolve()
        if key not in self._cache:
            logger.debug("Compiling schema %s for <%s>", path, root_name)
            self._cache[key] = self._compile(key)
        return self._cache[key]

    def validate(self, root_name: str, document: etree._ElementTree) -> Optional[List[ValidationError]]:
        """Validate *document*; ``None`` when no schema is mapped to *root_name*."""
        schema = self.schema_for(root_name)
        if schema is None:
            logger.debug("No schema for <%s>, skipping validation", root_name)
            return None
        if schema.validate(document):
            return []
        return [
            ValidationError(
                message=entry.message.strip(),
                line=entry.line,
                column=entry.column,
                category=entry.level_name.lower(),
                source="schema",
            )
            for entry in schema.error_log
        ]

    @staticmethod
    def _compile(path: Path) -> etree.XMLSchema:
        return etree.XMLSchema(etree.parse(str(path)))
