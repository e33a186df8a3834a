"""Playwright-backed browser owned by a single cluster worker."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

from playwright.sync_api import Page as PlaywrightPage
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ..core.models import Page, Transition
from .job import JobResult

if TYPE_CHECKING:  # pragma: no cover - import-time type checking only
    from .cluster import BrowserCluster

logger = logging.getLogger(__name__)

EVENT_SELECTORS = (
    'a[href^="#/"]',
    '[routerlink]:not(a)',
    'button[routerlink]',
    '[onclick]',
    '[role="link"]',
)
MAX_TRANSITIONS_PER_STATE = 20
NAVIGATION_TIMEOUT = 8000


class BrowserPeer:
    """One headless browser page, driven from the worker thread that created it."""

    def __init__(
        self,
        cluster: "BrowserCluster",
        *,
        headless: bool = True,
        cookies: Optional[Sequence[dict]] = None,
    ) -> None:
        self.cluster = cluster
        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(headless=headless)
        except Exception:
            self._playwright.stop()
            raise
        self._context = self._browser.new_context()
        if cookies:
            try:
                self._context.add_cookies(list(cookies))
            except Exception:
                logger.debug("Could not apply cookies to the browser context", exc_info=True)
        self._page = self._context.new_page()
        self._last_code = 0

    def save_result(self, result: JobResult) -> None:
        self.cluster.handle_job_result(result)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def load(self, url: str, transitions: Iterable[Transition] = ()) -> Optional[Page]:
        """Loads ``url`` then replays ``transitions``; ``None`` if navigation fails."""

        transitions = list(transitions)
        try:
            response = self._page.goto(url, timeout=NAVIGATION_TIMEOUT)
        except PlaywrightTimeoutError:
            logger.debug("Timed out loading %s", url)
            return None
        except Exception:
            logger.debug("Failed loading %s", url, exc_info=True)
            return None

        self._last_code = response.status if response is not None else 0
        self._wait_settled(self._page)

        for transition in transitions:
            if not self.trigger(transition):
                return None

        return self.snapshot(transitions, root_url=url)

    def trigger(self, transition: Transition) -> bool:
        try:
            element = self._page.locator(transition.element).first
            element.dispatch_event(transition.event, timeout=1000)
        except Exception:
            logger.debug("Could not trigger %s", transition, exc_info=True)
            return False

        self._wait_settled(self._page)
        return True

    def event_candidates(self) -> List[Transition]:
        """Transitions available from the current DOM state."""

        candidates: List[Transition] = []
        for selector in EVENT_SELECTORS:
            try:
                count = self._page.locator(selector).count()
            except Exception:
                continue
            for index in range(count):
                candidates.append(Transition(element=f"{selector} >> nth={index}", event="click"))
                if len(candidates) >= MAX_TRANSITIONS_PER_STATE:
                    return candidates
        return candidates

    def snapshot(self, transitions: Iterable[Transition] = (), root_url: Optional[str] = None) -> Page:
        try:
            html = self._page.content()
        except Exception:
            html = ""
        try:
            cookies = self._context.cookies()
        except Exception:
            cookies = []

        current_url = self._page.url
        return Page.from_response(
            current_url,
            self._last_code,
            html,
            cookies=cookies,
            transitions=transitions,
            root_url=root_url,
        )

    def close(self) -> None:
        try:
            self._browser.close()
        finally:
            self._playwright.stop()

    @staticmethod
    def _wait_settled(page: PlaywrightPage) -> None:
        try:
            page.wait_for_load_state("networkidle", timeout=3000)
        except Exception:
            try:
                page.wait_for_load_state("domcontentloaded", timeout=1500)
            except Exception:
                page.wait_for_timeout(300)
