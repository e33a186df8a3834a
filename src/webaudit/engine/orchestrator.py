"""Scan lifecycle: crawl, drain the audit queues, clean up, report.

The orchestrator owns the URL and page queues and is the only consumer of
both. Browser-cluster callbacks push into them concurrently, so every piece
of shared state here is guarded by a lock or lives in a thread-safe type.
"""

from __future__ import annotations

import logging
import re
import tempfile
import threading
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .. import __version__
from ..auth.session import Session
from ..browser_cluster.cluster import BrowserCluster
from ..browser_cluster.job import IdAllocator
from ..browser_cluster.peer import BrowserPeer
from ..checks.base import Check
from ..checks.manager import CheckManager
from ..core import platforms
from ..core.component import ComponentManager
from ..core.config import ScannerConfig
from ..core.dependencies import has_browser_executable
from ..core.errors import ComponentNotFoundError, ComponentOptionsInvalidError
from ..core.models import Page
from ..core.progress import compute_progress, eta
from ..core.report import AuditStore
from ..core.uri import to_absolute
from ..http.client import HttpClient
from ..plugins.manager import PluginManager
from ..recon.crawler import Spider
from ..recon.targeting import ScopeFilter
from ..reports.manager import ReportManager
from .dispatcher import BrowserDispatcher
from .pause import PauseController, PauseToken
from .queues import WorkQueue, WorkSignal
from .retry import RetryTracker
from .trainer import Trainer

logger = logging.getLogger(__name__)

# Safety net for the wake signal, in seconds.
POLL_INTERVAL = 1.0


class ScanStatus(str, Enum):
    READY = "ready"
    PREPARING = "preparing"
    CRAWLING = "crawling"
    AUDITING = "auditing"
    PAUSED = "paused"
    CLEANUP = "cleanup"
    DONE = "done"


def regexp_array_match(patterns: Optional[Iterable[Any]], value: str) -> bool:
    """``True`` when ``value`` matches every pattern (or there are none)."""

    compiled = [
        pattern if isinstance(pattern, re.Pattern) else re.compile(str(pattern))
        for pattern in (patterns or ())
        if pattern is not None
    ]
    return all(pattern.search(value) for pattern in compiled)


class ScanOrchestrator:
    """Ties together the spider, the browser cluster, the checks and the reports."""

    def __init__(
        self,
        config: ScannerConfig,
        *,
        http: Optional[HttpClient] = None,
        spider: Optional[Spider] = None,
        session: Optional[Session] = None,
        checks: Optional[CheckManager] = None,
        reports: Optional[ReportManager] = None,
        plugins: Optional[PluginManager] = None,
        browser_cluster_factory: Optional[Callable[[], BrowserCluster]] = None,
        has_browser: Optional[Callable[[], bool]] = None,
        id_allocator: Optional[IdAllocator] = None,
    ) -> None:
        self.config = config
        self.http = http or HttpClient(timeout=config.http_timeout, concurrency=config.http_concurrency)
        self.scope = ScopeFilter.for_target(
            config.target_url,
            exclude_path_patterns=config.exclude_path_patterns,
            exclude_page_patterns=config.exclude_page_patterns,
        )
        self.pause_controller = PauseController()
        self.signal = WorkSignal()

        # Full pages produced by the browser cluster, not reachable by URL alone.
        self.page_queue: WorkQueue[Page] = WorkQueue("page", self.signal)
        # Paths found by the spider, re-fetched when their turn comes.
        self.url_queue: WorkQueue[str] = WorkQueue("url", self.signal)
        self.retries = RetryTracker()

        self.checks = checks if checks is not None else CheckManager(self.http)
        self.reports = (
            reports
            if reports is not None
            else ReportManager(default_options={"json": {"outfile": str(config.report_path)}})
        )
        self.plugins = plugins if plugins is not None else PluginManager(self)
        self.session = session or Session(config, self.http, scope=self.scope)
        self.spider = spider or Spider(
            config, self.http, scope=self.scope, pause_controller=self.pause_controller
        )

        self._browser_cluster_factory = browser_cluster_factory or self._build_browser_cluster
        self._has_browser = has_browser or has_browser_executable
        self._id_allocator = id_allocator or IdAllocator()
        self.dispatcher = self._build_dispatcher()

        self._lock = threading.RLock()
        self._sitemap: Dict[str, int] = {}
        self._audited_page_count = 0
        self._current_url = ""
        self._status = ScanStatus.READY
        self._running = False
        self._auditing_queues = False
        self._start_datetime: Optional[datetime] = None
        self._finish_datetime: Optional[datetime] = None
        self._stopped = threading.Event()
        self._platforms: set[str] = set()
        self._audit_page_observers: List[Callable[[Page], None]] = []

        self.trainer = Trainer(self.scope, self.push_to_page_queue, page_limit_reached=self.page_limit_reached)
        self.http.on_complete(self.trainer.train)

        self._load_components()

    def __enter__(self) -> "ScanOrchestrator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        try:
            self.clean_up()
        finally:
            self.reset()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def status(self) -> str:
        if self.paused:
            return ScanStatus.PAUSED.value
        return self._status.value

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self.pause_controller.paused

    @property
    def version(self) -> str:
        return __version__

    @property
    def sitemap(self) -> Dict[str, int]:
        """Crawled and audited URLs with their last HTTP status code."""

        with self._lock:
            return dict(self._sitemap)

    @property
    def audited_page_count(self) -> int:
        with self._lock:
            return self._audited_page_count

    @property
    def platforms(self) -> List[str]:
        """Every platform identified so far, across all audited pages."""

        with self._lock:
            return sorted(self._platforms)

    @property
    def failures(self) -> List[str]:
        """Page URLs that never produced a response and were not audited."""

        return self.retries.failures

    @property
    def page_queue_total_size(self) -> int:
        return self.page_queue.total_size

    @property
    def url_queue_total_size(self) -> int:
        return self.url_queue.total_size

    def pause(self, holder: str = "") -> PauseToken:
        """Requests a pause; takes effect at the next checkpoint."""

        return self.pause_controller.pause(holder)

    def resume(self, token: Optional[PauseToken] = None) -> bool:
        return self.pause_controller.resume(token)

    def wait_until_stopped(self, timeout: Optional[float] = None) -> bool:
        return self._stopped.wait(timeout)

    def on_audit_page(self, callback: Callable[[Page], None]) -> None:
        self._audit_page_observers.append(callback)

    def page_limit_reached(self) -> bool:
        with self._lock:
            return self.config.page_limit_reached(len(self._sitemap))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def run(self, callback: Optional[Callable[[], None]] = None) -> AuditStore:
        """Runs the whole scan and returns its results.

        Failures during the audit are logged and the scan still cleans up and
        reports whatever it managed to gather.
        """

        self.prepare()

        try:
            self.audit()
        except Exception:
            logger.exception("Audit aborted, reporting partial results.")

        self.clean_up()

        if callback is not None:
            try:
                callback()
            except Exception:
                logger.exception("Post-audit callback failed")

        self._status = ScanStatus.DONE

        audit_store = self.audit_store()
        if not self.reports.empty():
            self.reports.run(audit_store)
        return audit_store

    def prepare(self) -> None:
        self._status = ScanStatus.PREPARING
        self._running = True
        self._stopped.clear()
        self._start_datetime = datetime.now()
        self._finish_datetime = None
        self.session.apply_session_cookie()
        self.plugins.run()

    def audit(self) -> None:
        self.pause_controller.wait_if_paused()

        self._status = ScanStatus.CRAWLING

        # A restricted path list replaces the crawl entirely.
        if self.config.restrict_paths:
            for path in self.config.restrict_paths:
                self.push_to_url_queue(to_absolute(self.config.target_url, path) or path)
        else:
            self.spider.run(self._handle_crawled_page)

        if self.checks.empty():
            logger.info("No checks loaded, nothing to audit.")
            return

        # Keep auditing until the queues are empty and the browsers have stopped.
        while True:
            self.signal.wait_for(
                lambda: not self._wait_for_browser() or self._has_audit_workload(),
                timeout=POLL_INTERVAL,
            )
            self.audit_queues()
            if not self._wait_for_browser() and not self._has_audit_workload():
                break

    def audit_queues(self) -> bool:
        """Drains the page queue, then the URL queue, auditing everything."""

        if self._auditing_queues or self.checks.empty() or not self._has_audit_workload():
            return False

        self._status = ScanStatus.AUDITING
        self._auditing_queues = True
        try:
            # Pages may already be waiting this early; consume them first.
            self._audit_page_queue()

            # Spider responses are not kept around since there is no telling
            # how big the site is, so every URL is requested again here.
            while not self.url_queue.empty():
                self.pause_controller.wait_if_paused()
                url = self.url_queue.pop(block=False)
                if url is None:
                    break

                page = self.http.fetch(url)
                if page.code == 0:
                    if self.retries.register_failure(url):
                        self.url_queue.requeue(url)
                    continue

                self.retries.register_success(url)
                self.audit_page(page)

                # Pages the audit triggered are consumed now to keep memory bounded.
                self._audit_page_queue()

            self._audit_page_queue()
        finally:
            self._auditing_queues = False
        return True

    def audit_page(self, page: Optional[Page]) -> bool:
        """Runs every loaded check against ``page``."""

        if page is None:
            return False

        if self.scope.skip_page(page):
            logger.info("Ignoring page due to exclusion criteria: %s", page.dom.url)
            return False

        with self._lock:
            self._audited_page_count += 1
        self.page_queue.filter.add(page.fingerprint)
        self._add_to_sitemap(page)
        self._merge_sitemap(self.dispatcher.sitemap)
        self.trainer.learn(page)

        logger.info("Auditing: [HTTP: %s] %s", page.code, page.dom.url)
        logger.debug("DOM depth: %s (Limit: %s)", page.dom.depth, self.config.dom_depth_limit)

        if not page.platforms:
            page.platforms = platforms.identify(page)
        if page.platforms:
            logger.info("Identified as: %s", ", ".join(page.platforms))
            with self._lock:
                self._platforms.update(page.platforms)

        for observer in list(self._audit_page_observers):
            try:
                observer(page)
            except Exception:
                logger.exception("Audit page observer failed")

        self._current_url = page.dom.url

        self.http.update_cookies(page.cookies)
        self.dispatcher.consider(page)

        for check in self.checks.schedule():
            self.pause_controller.wait_if_paused()
            self._check_page(check, page)

        self._harvest_http_responses()

        if self.checks.timing.has_candidates():
            logger.info("Verifying timing-attack candidates for: %s", page.dom.url)
            self.checks.timing.run()

        return True

    def clean_up(self) -> None:
        """Stops the clock, shuts the browsers down and waits for the plugins."""

        self._status = ScanStatus.CLEANUP

        self._merge_sitemap(self.dispatcher.sitemap)
        self.dispatcher.shutdown()

        self.page_queue.clear()
        self.page_queue.drain()
        self.url_queue.drain()

        self._finish_datetime = datetime.now()
        if self._start_datetime is None:
            self._start_datetime = self._finish_datetime

        self._running = False
        self._stopped.set()

        self.plugins.block()

    def reset(self) -> None:
        """Clears every bit of scan state so the instance can be reused."""

        self.dispatcher.shutdown()
        self.dispatcher = self._build_dispatcher()
        self.url_queue.reset()
        self.page_queue.reset()
        self.retries.clear()
        self.pause_controller.clear()
        with self._lock:
            self._sitemap.clear()
            self._audited_page_count = 0
            self._current_url = ""
            self._platforms.clear()
        self.trainer.clear()
        self._status = ScanStatus.READY
        self._running = False
        self._stopped.clear()
        self._start_datetime = None
        self._finish_datetime = None
        self._audit_page_observers.clear()
        self.http.reset()
        self.checks.reset()
        self.reports.clear()
        self.plugins.clear()

    # ------------------------------------------------------------------
    # Queues
    # ------------------------------------------------------------------
    def push_to_page_queue(self, page: Page) -> bool:
        """``False`` if ``page`` is excluded or has been queued before."""

        if self.scope.skip_page(page):
            return False
        if not self.page_queue.push(page, page.fingerprint):
            return False

        self._add_to_sitemap(page)
        return True

    def push_to_url_queue(self, url: str) -> bool:
        """``False`` once the page limit is hit, or if ``url`` is excluded or a repeat."""

        if self.page_limit_reached():
            return False

        absolute = to_absolute(self.config.target_url, url) or url
        if self.scope.skip_path(absolute):
            return False
        return self.url_queue.push(absolute, absolute)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------
    def audit_store(self) -> AuditStore:
        return AuditStore(
            options=self.config.to_dict(),
            sitemap=self.sitemap,
            issues=self.checks.results(),
            plugins=self.plugins.results(),
            start_datetime=self._start_datetime,
            finish_datetime=self._finish_datetime,
        )

    def stats(self) -> Dict[str, Any]:
        if self._start_datetime is None:
            self._start_datetime = datetime.now()

        with self._lock:
            sitemap_size = len(self._sitemap)
            auditmap_size = self._audited_page_count

        progress = compute_progress(auditmap_size, sitemap_size)
        http = self.http
        return {
            "requests": http.request_count,
            "responses": http.response_count,
            "time_out_count": http.time_out_count,
            "time": self.audit_store().delta_time,
            "avg": http.total_responses_per_second,
            "sitemap_size": sitemap_size,
            "auditmap_size": auditmap_size,
            "progress": progress,
            "curr_res_time": http.burst_response_time_sum,
            "curr_res_cnt": http.burst_response_count,
            "curr_avg": http.burst_responses_per_second,
            "average_res_time": http.burst_average_response_time,
            "max_concurrency": http.max_concurrency,
            "current_page": self._current_url,
            "eta": eta(progress, self._start_datetime),
        }

    def report_as(self, name: str, audit_store: Optional[AuditStore] = None) -> str:
        """Renders report ``name`` to a string.

        Only reports that write to an outfile can be rendered this way.
        """

        name = str(name)
        if name not in self.reports.available():
            raise ComponentNotFoundError(f"Report '{name}' could not be found.")

        store = audit_store or self.audit_store()
        loaded = self.reports.loaded
        outfile: Optional[Path] = None
        try:
            self.reports.clear()
            report = self.reports[name]
            if not report.has_outfile:
                raise ComponentOptionsInvalidError(
                    f"Report '{name}' cannot format the audit results as a String."
                )

            with tempfile.NamedTemporaryFile(suffix=f".{name}", delete=False) as tmp_file:
                outfile = Path(tmp_file.name)
            self.reports.run_one(name, store, {"outfile": str(outfile)})
            return outfile.read_text(encoding="utf-8")
        finally:
            if outfile is not None:
                outfile.unlink(missing_ok=True)
            self.reports.clear()
            self.reports.load(loaded)

    def list_checks(self, patterns: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        return self._list_components(self.checks, patterns)

    def list_reports(self, patterns: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        return self._list_components(self.reports, patterns)

    def list_plugins(self, patterns: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        return self._list_components(self.plugins, patterns)

    def list_platforms(self) -> Dict[str, Dict[str, str]]:
        return platforms.list_platforms()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _handle_crawled_page(self, page: Page) -> None:
        self._add_to_sitemap(page)
        self.push_to_url_queue(page.url)

    def _audit_page_queue(self) -> None:
        while not self.page_queue.empty():
            self.pause_controller.wait_if_paused()
            page = self.page_queue.pop(block=False)
            if page is None:
                break
            self.audit_page(page)

    def _has_audit_workload(self) -> bool:
        return not self.url_queue.empty() or not self.page_queue.empty()

    def _wait_for_browser(self) -> bool:
        return self.dispatcher.wait_for_browser()

    def _check_page(self, check: type[Check], page: Page) -> None:
        try:
            self.checks.run_one(check, page)
        except Exception:
            logger.exception("Error in %s", check.name)

    def _harvest_http_responses(self) -> None:
        logger.debug("Harvesting HTTP responses...")
        self.http.run()
        if not self.session.ensure_logged_in():
            logger.warning("Could not confirm the scan session is still logged in.")

    def _add_to_sitemap(self, page: Page) -> None:
        with self._lock:
            self._sitemap[page.dom.url] = page.code

    def _merge_sitemap(self, entries: Dict[str, int]) -> None:
        if not entries:
            return
        with self._lock:
            self._sitemap.update(entries)

    def _list_components(
        self,
        manager: ComponentManager,
        patterns: Optional[Sequence[Any]],
    ) -> List[Dict[str, Any]]:
        listed: List[Dict[str, Any]] = []
        for name in manager.available():
            path = manager.name_to_path(name)
            if not regexp_array_match(patterns, path):
                continue
            details = manager.info(name)
            details.update(shortname=name, path=path.strip())
            listed.append(details)
        return listed

    def _load_components(self) -> None:
        self.checks.load(self.config.checks)
        self.reports.load(self.config.reports)
        self.plugins.load(self.config.plugins)

    def _build_dispatcher(self) -> BrowserDispatcher:
        return BrowserDispatcher(
            dom_depth_limit=self.config.dom_depth_limit,
            cluster_factory=self._browser_cluster_factory,
            push_page=self.push_to_page_queue,
            push_url=self.push_to_url_queue,
            has_browser=self._has_browser,
            id_allocator=self._id_allocator,
        )

    def _build_browser_cluster(self) -> BrowserCluster:
        cookies = [cookie for cookie in self.http.cookies if cookie.get("domain")]
        headless = self.config.headless

        def peer_factory(cluster: BrowserCluster) -> BrowserPeer:
            return BrowserPeer(cluster, headless=headless, cookies=cookies)

        return BrowserCluster(
            peer_factory,
            pool_size=self.config.browser_pool_size,
            on_idle=self.signal.notify,
        )
