"""Pool of browser workers executing queued jobs."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Dict, Hashable, List, Optional

from ..core.errors import BrowserClusterError
from ..engine.queues import DedupFilter
from .job import Job, JobResult

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 4

JobCallback = Callable[[JobResult], None]
FailureCallback = Callable[[Job, BaseException], None]


class BrowserCluster:
    """Runs jobs on ``pool_size`` worker threads, one browser peer each.

    Callbacks are registered per job id and invoked from the worker thread
    for every result a job saves. A job counts as finished only after all of
    its callbacks returned, so ``done()`` never races a pending callback.
    """

    def __init__(
        self,
        peer_factory: Callable[["BrowserCluster"], object],
        *,
        pool_size: int = DEFAULT_POOL_SIZE,
        on_idle: Optional[Callable[[], None]] = None,
    ) -> None:
        self.pool_size = max(pool_size, 1)
        self._peer_factory = peer_factory
        self._on_idle = on_idle
        self._jobs: "queue.Queue[Optional[Job]]" = queue.Queue()
        self._callbacks: Dict[int, JobCallback] = {}
        self._failure_callbacks: Dict[int, FailureCallback] = {}
        self._sitemap: Dict[str, int] = {}
        self._explored = DedupFilter()
        self._captured = DedupFilter()
        self._pending = 0
        self._condition = threading.Condition()
        self._shutdown = False
        self._workers: List[threading.Thread] = []

        for index in range(self.pool_size):
            worker = threading.Thread(
                target=self._work,
                name=f"browser-cluster-{index}",
                daemon=True,
            )
            worker.start()
            self._workers.append(worker)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------
    def queue(
        self,
        job: Job,
        callback: Optional[JobCallback] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> None:
        with self._condition:
            if self._shutdown:
                raise BrowserClusterError("Browser cluster has been shut down.")
            if callback is not None:
                self._callbacks[job.id] = callback
            if on_failure is not None:
                self._failure_callbacks[job.id] = on_failure
            self._pending += 1
        self._jobs.put(job)

    def done(self) -> bool:
        with self._condition:
            return self._pending == 0

    def wait(self, timeout: Optional[float] = None) -> bool:
        with self._condition:
            return self._condition.wait_for(lambda: self._pending == 0, timeout)

    @property
    def pending_jobs(self) -> int:
        with self._condition:
            return self._pending

    @property
    def sitemap(self) -> Dict[str, int]:
        with self._condition:
            return dict(self._sitemap)

    def claim_exploration(self, state: Hashable) -> bool:
        """``True`` the first time a DOM state is explored."""

        return self._explored.add(state)

    def claim_capture(self, state: Hashable) -> bool:
        """``True`` the first time a DOM state is reported as a result."""

        return self._captured.add(state)

    def handle_job_result(self, result: JobResult) -> None:
        page = result.page
        with self._condition:
            if page is not None:
                self._sitemap[page.dom.url] = page.code
            callback = self._callbacks.get(result.job.id)

        if callback is None:
            return
        try:
            callback(result)
        except Exception:
            logger.exception("Callback for browser job %s failed", result.job.id)

    def shutdown(self, wait: bool = True) -> None:
        with self._condition:
            if self._shutdown:
                return
            self._shutdown = True

        for _ in self._workers:
            self._jobs.put(None)

        if wait:
            for worker in self._workers:
                worker.join()

        with self._condition:
            self._callbacks.clear()
            self._failure_callbacks.clear()

    # ------------------------------------------------------------------
    # Worker loop
    # ------------------------------------------------------------------
    def _work(self) -> None:
        peer = None
        try:
            peer = self._peer_factory(self)
        except Exception:
            logger.exception("Could not start a browser for %s", threading.current_thread().name)

        try:
            while True:
                job = self._jobs.get()
                if job is None:
                    break
                try:
                    if peer is None:
                        raise BrowserClusterError("No browser available for this worker.")
                    job.configure_and_run(peer)  # type: ignore[arg-type]
                except Exception as exc:
                    logger.exception("Browser job %r failed", job)
                    self._notify_failure(job, exc)
                finally:
                    self._job_done()
        finally:
            if peer is not None:
                close = getattr(peer, "close", None)
                if close is not None:
                    try:
                        close()
                    except Exception:
                        logger.debug("Browser peer did not close cleanly", exc_info=True)

    def _notify_failure(self, job: Job, exc: BaseException) -> None:
        with self._condition:
            on_failure = self._failure_callbacks.get(job.id)
        if on_failure is None:
            return
        try:
            on_failure(job, exc)
        except Exception:
            logger.exception("Failure callback for browser job %s failed", job.id)

    def _job_done(self) -> None:
        with self._condition:
            self._pending -= 1
            idle = self._pending == 0
            self._condition.notify_all()

        if idle and self._on_idle is not None:
            self._on_idle()
