"""HTTP transport used by the spider, the audit loop and the checks."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

import requests

from ..core.models import Page

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
MAX_THREADS = 10
USER_AGENT = "webaudit/1.0"

ResponseCallback = Callable[[Page], None]


@dataclass
class QueuedRequest:
    url: str
    callback: ResponseCallback
    method: str = "GET"
    params: Optional[Dict[str, str]] = None
    data: Optional[Dict[str, str]] = None


class HttpClient:
    """Thin ``requests`` wrapper that turns responses into :class:`Page` objects.

    Checks ``queue`` their requests and the orchestrator harvests them in one
    concurrent batch with ``run``.
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        concurrency: int = MAX_THREADS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.max_concurrency = max(concurrency, 1)
        self._session = session or self._prepare_session()
        self._queue: List[QueuedRequest] = []
        self._on_complete: List[ResponseCallback] = []
        self._lock = threading.Lock()
        self._reset_counters()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    def fetch(self, url: str) -> Page:
        return self.request(url)

    def request(
        self,
        url: str,
        *,
        method: str = "GET",
        params: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Page:
        """Performs a request; network failures yield a page with code ``0``."""

        self._count("request_count")
        started = time.monotonic()
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                data=data,
                timeout=timeout or self.timeout,
                allow_redirects=True,
            )
        except requests.Timeout:
            self._count("time_out_count")
            logger.debug("Request timed out: %s", url)
            return Page.empty(url)
        except requests.RequestException:
            logger.debug("Request failed: %s", url, exc_info=True)
            return Page.empty(url)

        elapsed = time.monotonic() - started
        self._record_response(elapsed)

        content_type = response.headers.get("Content-Type", "")
        body = response.text if "html" in content_type or not content_type else ""
        return Page.from_response(
            response.url,
            response.status_code,
            body,
            headers=dict(response.headers),
            cookies=self.cookies,
            response_time=elapsed,
        )

    def queue(
        self,
        url: str,
        callback: ResponseCallback,
        *,
        method: str = "GET",
        params: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> None:
        with self._lock:
            self._queue.append(
                QueuedRequest(url=url, callback=callback, method=method, params=params, data=data)
            )

    def on_complete(self, callback: ResponseCallback) -> None:
        """Registers ``callback`` for every response ``run`` harvests."""

        with self._lock:
            self._on_complete.append(callback)

    def run(self) -> int:
        """Performs every queued request and calls back with the responses.

        Callbacks may queue more requests; those are harvested too. The
        ``on_complete`` observers see each response after its own callback.
        """

        harvested = 0
        self._start_burst()
        while True:
            with self._lock:
                batch, self._queue = self._queue, []
            if not batch:
                return harvested

            with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_concurrency) as executor:
                futures = {
                    executor.submit(
                        self.request, item.url, method=item.method, params=item.params, data=item.data
                    ): item
                    for item in batch
                }
                for future in concurrent.futures.as_completed(futures):
                    item = futures[future]
                    harvested += 1
                    try:
                        page = future.result()
                        item.callback(page)
                    except Exception:
                        logger.exception("Response callback failed for %s", item.url)
                        continue
                    self._notify_complete(page)

    def _notify_complete(self, page: Page) -> None:
        with self._lock:
            observers = list(self._on_complete)
        for observer in observers:
            try:
                observer(page)
            except Exception:
                logger.exception("on_complete observer failed for %s", page.url)

    # ------------------------------------------------------------------
    # Cookies
    # ------------------------------------------------------------------
    @property
    def cookies(self) -> List[dict]:
        return [
            {
                "name": cookie.name,
                "value": cookie.value or "",
                "domain": cookie.domain,
                "path": cookie.path or "/",
            }
            for cookie in self._session.cookies
        ]

    def update_cookies(self, cookies: Optional[Iterable[dict]]) -> None:
        for cookie in cookies or ():
            name = cookie.get("name")
            value = cookie.get("value")
            if name and value:
                self._session.cookies.set(
                    name, value, domain=cookie.get("domain") or "", path=cookie.get("path") or "/"
                )

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    @property
    def total_responses_per_second(self) -> float:
        with self._lock:
            if self._first_request is None or not self.response_count:
                return 0.0
            elapsed = time.monotonic() - self._first_request
            return round(self.response_count / elapsed, 2) if elapsed > 0 else 0.0

    @property
    def burst_responses_per_second(self) -> float:
        with self._lock:
            elapsed = time.monotonic() - self._burst_started
            if not self.burst_response_count or elapsed <= 0:
                return 0.0
            return round(self.burst_response_count / elapsed, 2)

    @property
    def burst_average_response_time(self) -> float:
        with self._lock:
            if not self.burst_response_count:
                return 0.0
            return round(self.burst_response_time_sum / self.burst_response_count, 4)

    def reset(self) -> None:
        with self._lock:
            self._queue.clear()
        self._session.cookies.clear()
        self._reset_counters()

    def _reset_counters(self) -> None:
        self.request_count = 0
        self.response_count = 0
        self.time_out_count = 0
        self.burst_response_time_sum = 0.0
        self.burst_response_count = 0
        self._burst_started = time.monotonic()
        self._first_request: Optional[float] = None

    def _start_burst(self) -> None:
        with self._lock:
            self.burst_response_time_sum = 0.0
            self.burst_response_count = 0
            self._burst_started = time.monotonic()

    def _count(self, attribute: str) -> None:
        with self._lock:
            setattr(self, attribute, getattr(self, attribute) + 1)
            if self._first_request is None:
                self._first_request = time.monotonic()

    def _record_response(self, elapsed: float) -> None:
        with self._lock:
            self.response_count += 1
            self.burst_response_count += 1
            self.burst_response_time_sum += elapsed

    @staticmethod
    def _prepare_session() -> requests.Session:
        session = requests.Session()
        session.headers["User-Agent"] = USER_AGENT
        return session
