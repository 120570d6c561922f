# File: site_checker/parser/tidy.py
"""site_checker.parser.tidy: lint HTML through the external ``tidy`` program."""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
from typing import List, Union

from site_checker.crawler.models import ValidationError

__all__ = ["TidyLinter", "parse_tidy_output"]

logger = logging.getLogger("SiteChecker")

# line 82 column 1 - Warning: <table> lacks "summary" attribute
_TIDY_LINE_RE = re.compile(r"^line (\d+) column (\d+) - (.*?): (.*)$")


def parse_tidy_output(output: str) -> List[ValidationError]:
    """Convert ``tidy -errors`` output into ValidationError entries."""
    errors: List[ValidationError] = []
    for raw in output.splitlines():
        line = raw.strip()
        if not line:
            continue
        match = _TIDY_LINE_RE.match(line)
        if match is None:
            logger.debug("Unrecognised tidy output: %r", line)
            continue
        errors.append(
            ValidationError(
                message=match.group(4).strip(),
                line=int(match.group(1)),
                column=int(match.group(2)),
                category=match.group(3).strip().lower(),
                source="tidy",
            )
        )
    return errors


class TidyLinter:
    """Runs ``tidy -utf8 -quiet -errors`` on a document read from stdin."""

    def __init__(self, command: str = "tidy") -> None:
        resolved = shutil.which(command)
        if resolved is None:
            raise FileNotFoundError(f"tidy executable not found: {command}")
        self.command = resolved

    async def lint(self, html: Union[str, bytes]) -> List[ValidationError]:
        data = html.encode("utf-8") if isinstance(html, str) else html
        proc = await asyncio.create_subprocess_exec(
            self.command,
            "-utf8",
            "-quiet",
            "-errors",
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        output, _ = await proc.communicate(data)
        # exit status 1 means warnings, 2 errors; both are reported through the output
        return parse_tidy_output(output.decode("utf-8", errors="replace"))
