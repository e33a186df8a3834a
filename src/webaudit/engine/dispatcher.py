"""Hands pages with client-side code to the browser cluster."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional

from ..browser_cluster.cluster import BrowserCluster
from ..browser_cluster.job import IdAllocator, JobResult
from ..browser_cluster.jobs import ResourceExploration
from ..core.models import Page

logger = logging.getLogger(__name__)


class BrowserDispatcher:
    """Submits DOM/JS exploration jobs and folds their pages back into the queues.

    A single job template is forwarded for every submission, so one callback
    serves all exploration results for the lifetime of the dispatcher.
    """

    def __init__(
        self,
        *,
        dom_depth_limit: int,
        cluster_factory: Callable[[], BrowserCluster],
        push_page: Callable[[Page], bool],
        push_url: Callable[[str], bool],
        has_browser: Callable[[], bool],
        id_allocator: IdAllocator,
    ) -> None:
        self.dom_depth_limit = dom_depth_limit
        self._cluster_factory = cluster_factory
        self._push_page = push_page
        self._push_url = push_url
        self._has_browser = has_browser
        self._id_allocator = id_allocator
        self._cluster: Optional[BrowserCluster] = None
        self._template: Optional[ResourceExploration] = None
        self._lock = threading.Lock()

    @property
    def cluster(self) -> Optional[BrowserCluster]:
        return self._cluster

    def consider(self, page: Page) -> bool:
        """Queues ``page`` for browser analysis if it is worth exploring."""

        if self.dom_depth_limit < page.dom.depth + 1:
            return False
        if not page.has_script or not self._has_browser():
            return False

        cluster, template = self._ensure_cluster()
        cluster.queue(template.forward(resource=page), self._handle_result)
        return True

    def wait_for_browser(self) -> bool:
        cluster = self._cluster
        return cluster is not None and not cluster.done()

    @property
    def sitemap(self) -> Dict[str, int]:
        cluster = self._cluster
        return cluster.sitemap if cluster is not None else {}

    def shutdown(self) -> None:
        with self._lock:
            cluster, self._cluster = self._cluster, None
        if cluster is not None:
            cluster.shutdown()

    def handle_browser_page(self, page: Page) -> bool:
        if not self._push_page(page):
            return False

        pushed_paths = sum(1 for path in page.paths if self._push_url(path))

        logger.info("Got page via DOM/AJAX analysis with the following transitions:")
        logger.info(page.dom.url)
        for transition in page.dom.transitions:
            logger.info("-- %s", transition)
        logger.info("-- Analysis resulted in %d usable paths.", pushed_paths)
        return True

    def _handle_result(self, result: JobResult) -> None:
        if result.page is not None:
            self.handle_browser_page(result.page)

    def _ensure_cluster(self) -> tuple[BrowserCluster, ResourceExploration]:
        with self._lock:
            if self._cluster is None:
                self._cluster = self._cluster_factory()
            if self._template is None:
                self._template = ResourceExploration(id_allocator=self._id_allocator)
            return self._cluster, self._template
