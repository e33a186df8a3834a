"""Deferred units of work executed by the browser cluster."""

from __future__ import annotations

import abc
import itertools
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, Optional, Type, TypeVar

if TYPE_CHECKING:  # pragma: no cover - import-time type checking only
    from ..core.models import Page
    from .peer import BrowserPeer

J = TypeVar("J", bound="Job")


class IdAllocator:
    """Thread-safe monotonically increasing id sequence."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)


@dataclass
class JobResult:
    """Something a job produced while running, routed back by ``job.id``."""

    job: "Job"
    page: Optional["Page"] = None


class Job(abc.ABC):
    """A unit of browser work with a stable correlation id.

    The cluster ties callbacks to ``id`` rather than to the instance, so
    ``forward`` and ``forward_as`` let one registered callback serve every
    re-submission of the same kind of request. Fresh ids come from the
    ``id_allocator`` the owner passes in.
    """

    def __init__(
        self,
        *,
        id_allocator: IdAllocator,
        id: Optional[int] = None,
        **options: Any,
    ) -> None:
        self.options: dict[str, Any] = dict(options)
        self._id_allocator = id_allocator
        self.id: int = id if id is not None else self._id_allocator.next()
        self.browser: Optional["BrowserPeer"] = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"

    @abc.abstractmethod
    def run(self) -> None:
        """Job payload; ``self.browser`` is bound while this runs."""

    def configure_and_run(self, browser: "BrowserPeer") -> None:
        """Runs the payload with ``browser`` bound for exactly this call."""

        with self.bound(browser):
            self.run()

    @contextmanager
    def bound(self, browser: "BrowserPeer") -> Iterator["Job"]:
        self._set_resources(browser)
        try:
            yield self
        finally:
            self._remove_resources()

    def save_result(self, result: JobResult) -> None:
        if self.browser is None:
            raise RuntimeError(f"{self!r} is not bound to a browser")
        self.browser.save_result(result)

    def forward(self: J, **options: Any) -> J:
        """New job of the same type, with this job's id, configured with ``options``."""

        return type(self)(id=self.id, id_allocator=self._id_allocator, **options)

    def forward_as(self, job_type: Type[J], **options: Any) -> J:
        return job_type(id=self.id, id_allocator=self._id_allocator, **options)

    def dup(self: J) -> J:
        return type(self)(id=self.id, id_allocator=self._id_allocator, **self.options)

    def clean_copy(self: J) -> J:
        """Copy of this job that is never bound to a browser."""

        copy = self.dup()
        copy._remove_resources()
        return copy

    def _set_resources(self, browser: "BrowserPeer") -> None:
        self.browser = browser

    def _remove_resources(self) -> None:
        self.browser = None
