"""In-memory stand-ins for the network and browser collaborators."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from webaudit.checks.base import Check  # type: ignore[import]
from webaudit.core.models import Page, Transition  # type: ignore[import]
from webaudit.http.client import HttpClient  # type: ignore[import]


class FakeHttp(HttpClient):
    """Serves bodies from a dict; unknown or failing URLs get no response."""

    def __init__(self, bodies: Optional[Dict[str, str]] = None, failing: Iterable[str] = ()) -> None:
        super().__init__(timeout=1)
        self.bodies = dict(bodies or {})
        self.failing = set(failing)
        self.fetched: List[str] = []

    def request(self, url, *, method="GET", params=None, data=None, timeout=None):
        self._count("request_count")
        self.fetched.append(url)
        if url in self.failing or url not in self.bodies:
            return Page.empty(url)

        self._record_response(0.01)
        return Page.from_response(url, 200, self.bodies[url], response_time=0.01)


class FakeSpider:
    """Reports a fixed list of URLs as discovered."""

    def __init__(self, http: HttpClient, urls: Iterable[str]) -> None:
        self.http = http
        self.urls = list(urls)

    def run(self, on_discover, seeds=None):
        for url in self.urls:
            on_discover(self.http.fetch(url))


class BrokenSpider:
    def run(self, on_discover, seeds=None):
        raise RuntimeError("crawl exploded")


class FakePeer:
    """Browser peer whose renders are looked up by ``(url, transitions)``."""

    def __init__(
        self,
        cluster,
        renders: Dict[Tuple[str, Tuple[Transition, ...]], Page],
        events: Optional[Dict[str, List[Transition]]] = None,
    ) -> None:
        self.cluster = cluster
        self.renders = renders
        self.events = events or {}
        self.closed = False
        self.loads: List[Tuple[str, Tuple[Transition, ...]]] = []
        self._current: Optional[str] = None

    def save_result(self, result) -> None:
        self.cluster.handle_job_result(result)

    def load(self, url: str, transitions=()) -> Optional[Page]:
        self.loads.append((url, tuple(transitions)))
        page = self.renders.get((url, tuple(transitions)))
        self._current = page.dom.url if page is not None else url
        return page

    def event_candidates(self) -> List[Transition]:
        return list(self.events.get(self._current or "", []))

    def close(self) -> None:
        self.closed = True


def recording_check(seen: List[str], name: str = "recorder", order: int = 50):
    """Builds a check class that records every page URL it audits."""

    class RecordingCheck(Check):
        def run(self) -> None:
            seen.append(self.page.dom.url)

    RecordingCheck.name = name
    RecordingCheck.order = order
    return RecordingCheck


class ExplodingCheck(Check):
    name = "exploding"
    order = 1

    def run(self) -> None:
        raise ValueError("check failed")
