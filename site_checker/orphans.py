# === FILE: site_checker/orphans.py ===

"""Module for finding site files that no crawled document references.

Maps every referenced local URI back to the file that most likely served it
and lists the remaining files under the site directory.
"""

from __future__ import annotations

import fnmatch
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Sequence, Set, Union
from urllib.parse import unquote, urlsplit

INDEX_FILE = "index.html"


def candidate_files(uri: str, root_path: str = "/") -> List[PurePosixPath]:
    """Site-relative files that may have served *uri*."""
    path = unquote(urlsplit(uri).path)
    if path.startswith(root_path):
        path = "/" + path[len(root_path):]
    relative = path.lstrip("/")
    if not relative or path.endswith("/"):
        return [PurePosixPath(relative or ".") / INDEX_FILE]
    base = PurePosixPath(relative)
    return [base, base / INDEX_FILE, base.with_name(base.name + ".html")]


def _excluded(relative: PurePosixPath, exclude: Sequence[str]) -> bool:
    if any(part.startswith(".") for part in relative.parts):
        return True
    text = relative.as_posix()
    return any(fnmatch.fnmatch(text, pattern) for pattern in exclude)


def find_orphans(
    site_dir: Union[str, Path],
    referenced: Iterable[str],
    exclude: Sequence[str] = (),
    root_path: str = "/",
) -> List[str]:
    """Return site-relative POSIX paths of files never referenced, sorted.

    Dot-files and paths matching an *exclude* glob are not reported. *root_path*
    is the URI path the site directory is served under.
    """
    root = Path(site_dir)
    covered: Set[PurePosixPath] = set()
    for uri in referenced:
        for candidate in candidate_files(uri, root_path):
            if (root / candidate).is_file():
                covered.add(candidate)
                break

    orphans: List[str] = []
    for file in root.rglob("*"):
        if not file.is_file():
            continue
        relative = PurePosixPath(file.relative_to(root).as_posix())
        if relative in covered or _excluded(relative, exclude):
            continue
        orphans.append(relative.as_posix())
    return sorted(orphans)
