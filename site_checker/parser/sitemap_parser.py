# File: site_checker/parser/sitemap_parser.py
"""site_checker.parser.sitemap_parser: извлечение URL из <loc> уже разобранного sitemap."""

from __future__ import annotations

from typing import List

from lxml import etree

SITEMAP_ROOTS = ("urlset", "sitemapindex")


def sitemap_locations(document: etree._ElementTree) -> List[str]:
    """Возвращает текст всех тегов <loc> в порядке документа.

    Args:
        document: дерево sitemap (urlset или sitemapindex), прошедшее проверку.

    Returns:
        Список URL, найденных в <loc> тегах.

    Пример:
    ```python
    from lxml import etree
    from site_checker.parser.sitemap_parser import sitemap_locations

    tree = etree.ElementTree(etree.fromstring(xml_bytes))
    urls = sitemap_locations(tree)
    ```
    """
    locs = document.getroot().findall(".//{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]
