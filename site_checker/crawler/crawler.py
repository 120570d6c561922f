# === FILE: site_checker/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_checker.config import CheckerConfig
from site_checker.crawler.dispatcher import ContentKind, classify
from site_checker.crawler.fetcher import Fetcher, FetcherProtocol
from site_checker.crawler.link_extractor import extract_css_links
from site_checker.crawler.models import Failure, FailureKind, Response, ValidationError
from site_checker.crawler.session import CrawlSession
from site_checker.crawler.uri import is_fetchable, is_local, normalize
from site_checker.parser.markup import MarkupMode, filter_ignored, parse_markup
from site_checker.parser.schemas import SchemaRegistry
from site_checker.parser.sitemap_parser import SITEMAP_ROOTS, sitemap_locations
from site_checker.parser.tidy import TidyLinter
from site_checker.report.errors import ErrorReporter

__all__ = ("SiteChecker", "Task")


@dataclass(slots=True, frozen=True)
class Task:
    """One pending check: a reference, the document it came from, redirect hops so far.

    ``chain`` holds the URIs of the redirect sequence that led here.
    """

    ref: str
    base: Optional[str] = None
    redirects: int = 0
    chain: Tuple[str, ...] = ()


@dataclass(slots=True)
class _Step:
    failure: Optional[Failure] = None
    follow: List[Task] = field(default_factory=list)


class SiteChecker:
    """
    Проверка одного сайта: обход всех достижимых ресурсов с первой остановкой на ошибке.

    Обход в глубину в порядке ссылок документа, через явный стек вместо рекурсии.
    Одновременно выполняется не более одного запроса.
    """

    def __init__(
        self,
        config: CheckerConfig,
        fetcher: Optional[FetcherProtocol] = None,
        linter: Optional[TidyLinter] = None,
        reporter: Optional[ErrorReporter] = None,
    ) -> None:
        self.config = config
        self.site_uri = normalize(str(config.site_uri))
        self.session = CrawlSession.for_site(
            self.site_uri,
            SchemaRegistry(extra=config.schemas),
        )
        self.fetcher = fetcher
        if linter is None and config.tidy:
            linter = TidyLinter(config.tidy_command)
        self.linter = linter
        self.reporter = reporter or ErrorReporter()
        self.ignore = frozenset(config.ignore_list())
        self.logger = logging.getLogger("SiteChecker")
        self._http: Optional[ClientSession] = None

    async def __aenter__(self) -> SiteChecker:
        if self.fetcher is None:
            self._http = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
            )
            self.fetcher = Fetcher(self._http)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._http is not None and not self._http.closed:
            await self._http.close()

    # ------------------------------------------------------------------ #
    # Traversal                                                          #
    # ------------------------------------------------------------------ #

    async def run(self) -> Optional[Failure]:
        """Check the configured site; ``None`` means every resource passed."""
        self.logger.info("Старт проверки: %s", self.site_uri)
        start = time.monotonic()
        failure = await self.check(self.site_uri)
        duration = time.monotonic() - start
        if failure is None:
            self.logger.info(
                "Завершено: %d URI за %.2f с, предупреждений: %d",
                len(self.session.visited), duration, len(self.session.warnings),
            )
        else:
            self.reporter.report_failure(failure)
        return failure

    async def check(self, uri: str, base: Optional[str] = None) -> Optional[Failure]:
        """Check *uri* and everything reachable from it; stop at the first failure."""
        if self.fetcher is None:
            raise RuntimeError("Fetcher not initialized")
        stack: List[Task] = [Task(uri, base)]
        while stack:
            step = await self._step(stack.pop())
            if step.failure is not None:
                return step.failure
            # reversed, so the first link of a document is checked first
            stack.extend(reversed(step.follow))
        return None

    async def _step(self, task: Task) -> _Step:
        try:
            uri = normalize(task.ref, task.base)
        except ValueError:
            self.logger.debug("Skipping malformed reference %r on %s", task.ref, task.base)
            return _Step()
        if uri in task.chain:
            failure = Failure(FailureKind.TOO_MANY_REDIRECTS, uri, f"Redirect loop: {uri}")
            return self._external(failure, is_local(uri, self.session.origin))
        if self.session.visited.seen(uri) or not is_fetchable(uri):
            return _Step()

        local = is_local(uri, self.session.origin)
        if not local and self.config.external_links == "ignore":
            return _Step()

        if task.redirects > self.config.max_redirects:
            failure = Failure(
                FailureKind.TOO_MANY_REDIRECTS,
                uri,
                f"Too many redirects (>{self.config.max_redirects}): {uri}",
            )
            return self._external(failure, local)

        self.session.visited.mark_seen(uri)
        try:
            response = await self.fetcher.fetch(uri, read_body=local)
        except (ClientError, asyncio.TimeoutError) as exc:
            failure = Failure(FailureKind.UNREACHABLE, uri, f"URI unreachable: {uri} ({exc or type(exc).__name__})")
            return self._external(failure, local)

        status = response.status
        if 200 <= status < 300:
            if not local:
                return _Step()
            self.session.referenced.append(uri)
            return await self._dispatch(uri, response)
        if 300 <= status < 400:
            location = response.location
            if not location:
                return self._external(Failure.bad_status(uri, status, "redirect without Location"), local)
            self.logger.debug("Redirect %s -> %s", uri, location)
            return _Step(follow=[Task(location, uri, task.redirects + 1, task.chain + (uri,))])
        if status == 404:
            return self._external(Failure.not_found(uri), local)
        return self._external(Failure.bad_status(uri, status), local)

    def _external(self, failure: Failure, local: bool) -> _Step:
        """Fatal for local URIs; foreign ones follow the external_links policy."""
        if local or self.config.external_links == "fatal":
            return _Step(failure=failure)
        self.logger.warning("External link failed: %s", failure.message)
        self.session.warn(failure.message)
        return _Step()

    # ------------------------------------------------------------------ #
    # Content                                                            #
    # ------------------------------------------------------------------ #

    async def _dispatch(self, uri: str, response: Response) -> _Step:
        dispatch = classify(response)
        if dispatch.kind is ContentKind.IGNORED:
            return _Step()
        if dispatch.kind is ContentKind.UNKNOWN:
            message = f"skipping unknown resource type: {uri} ({response.content_type or 'none'})"
            self.logger.warning(message)
            self.session.warn(message)
            return _Step()
        if dispatch.kind is ContentKind.CSS:
            links = extract_css_links(response.text())
            return _Step(follow=[Task(ref, uri) for ref in links])
        return await self._check_markup(uri, response, dispatch.mode)

    async def _check_markup(self, uri: str, response: Response, mode: MarkupMode) -> _Step:
        if mode is not MarkupMode.XML and self.linter is not None:
            lint = filter_ignored(await self.linter.lint(response.body), self.ignore)
            if lint:
                return self._invalid(uri, lint, FailureKind.MARKUP_INVALID, "HTML parsing failed (via Tidy)")

        body = response.body if mode is MarkupMode.XML else response.text()
        parsed = parse_markup(body, mode, self.ignore)
        if parsed.errors:
            label = "XML" if mode is MarkupMode.XML else "HTML"
            return self._invalid(uri, parsed.errors, FailureKind.MARKUP_INVALID, f"{label} parsing failed")

        links: List[str] = list(parsed.links)
        if mode is MarkupMode.XML and parsed.root_name:
            schema_errors = self.session.schemas.validate(parsed.root_name, parsed.document)
            if schema_errors:
                return self._invalid(uri, schema_errors, FailureKind.SCHEMA_INVALID, "XML validation failed")
            if schema_errors is not None and self.config.follow_sitemap and parsed.root_name in SITEMAP_ROOTS:
                links.extend(sitemap_locations(parsed.document))
        return _Step(follow=[Task(ref, uri) for ref in links])

    def _invalid(
        self, uri: str, errors: Sequence[ValidationError], kind: FailureKind, headline: str
    ) -> _Step:
        self.session.errors.extend(errors)
        self.reporter.report(uri, errors, "XML" if kind is FailureKind.SCHEMA_INVALID else "markup")
        return _Step(failure=Failure(kind, uri, f"{headline}: {uri}", errors=tuple(errors)))
