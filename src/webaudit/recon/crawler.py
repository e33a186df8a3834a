"""Breadth-first spider feeding discovered pages to the audit engine."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Iterable, Optional

from ..core.config import ScannerConfig
from ..core.models import Page
from ..engine.pause import PauseController
from ..http.client import HttpClient
from .state import CrawlerRuntimeState
from .targeting import ScopeFilter

logger = logging.getLogger(__name__)


@dataclass
class Spider:
    """Follows in-scope links from the seed URL until nothing new turns up."""

    config: ScannerConfig
    http: HttpClient
    scope: Optional[ScopeFilter] = None
    pause_controller: PauseController = field(default_factory=PauseController)

    def __post_init__(self) -> None:
        if self.scope is None:
            self.scope = ScopeFilter.for_target(
                self.config.target_url,
                exclude_path_patterns=self.config.exclude_path_patterns,
                exclude_page_patterns=self.config.exclude_page_patterns,
            )
        self._state = CrawlerRuntimeState()

    @property
    def runtime_state(self) -> CrawlerRuntimeState:
        """Return the current mutable runtime state for observability tools."""

        return self._state

    def run(
        self,
        on_discover: Callable[[Page], None],
        seeds: Optional[Iterable[str]] = None,
    ) -> CrawlerRuntimeState:
        """Crawls synchronously, calling ``on_discover`` once per fetched page."""

        self._state = CrawlerRuntimeState()
        to_visit: Deque[str] = deque()
        for url in seeds or (self.config.target_url,):
            self._queue_url(to_visit, url)

        while to_visit:
            self.pause_controller.wait_if_paused()
            if self.config.page_limit_reached(self._state.visited_count):
                logger.info("Page limit reached, stopping the crawl.")
                break

            url = to_visit.popleft()
            if url in self._state.visited_urls:
                continue
            self._state.visited_urls.add(url)

            page = self.http.fetch(url)
            if page.code == 0:
                self._state.failed_urls.add(url)
                logger.debug("No response while crawling %s", url)
                continue

            self._state.visited_count += 1
            on_discover(page)

            for path in page.paths:
                self._queue_url(to_visit, path)

        return self._state

    def _queue_url(self, to_visit: Deque[str], url: str) -> None:
        assert self.scope is not None
        if self.scope.skip_path(url):
            return
        if url in self._state.seen_urls:
            return
        self._state.seen_urls.add(url)
        to_visit.append(url)
