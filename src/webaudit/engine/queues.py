"""Thread-safe audit work queues with duplicate filtering."""

from __future__ import annotations

import threading
from collections import deque
from typing import Callable, Deque, Generic, Hashable, Optional, TypeVar

T = TypeVar("T")


class WorkSignal:
    """Wakes the orchestrator loop when work arrives or the browser pool idles."""

    def __init__(self) -> None:
        self._condition = threading.Condition()

    def notify(self) -> None:
        with self._condition:
            self._condition.notify_all()

    def wait_for(self, predicate: Callable[[], bool], timeout: Optional[float] = None) -> bool:
        with self._condition:
            return self._condition.wait_for(predicate, timeout)


class DedupFilter:
    """Append-only set of fingerprints seen during a scan."""

    def __init__(self) -> None:
        self._seen: set[Hashable] = set()
        self._lock = threading.Lock()

    def add(self, fingerprint: Hashable) -> bool:
        """Records ``fingerprint``; ``False`` if it was already present."""

        with self._lock:
            if fingerprint in self._seen:
                return False
            self._seen.add(fingerprint)
            return True

    def __contains__(self, fingerprint: Hashable) -> bool:
        with self._lock:
            return fingerprint in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def clear(self) -> None:
        with self._lock:
            self._seen.clear()


class WorkQueue(Generic[T]):
    """FIFO queue paired with a dedup filter and a lifetime push counter."""

    def __init__(self, name: str, signal: Optional[WorkSignal] = None) -> None:
        self.name = name
        self.filter = DedupFilter()
        self._items: Deque[T] = deque()
        self._condition = threading.Condition()
        self._signal = signal
        self._total_size = 0
        self._drained = False

    @property
    def total_size(self) -> int:
        with self._condition:
            return self._total_size

    def push(self, item: T, fingerprint: Hashable) -> bool:
        """Enqueues ``item`` unless ``fingerprint`` has been pushed before."""

        with self._condition:
            if not self.filter.add(fingerprint):
                return False
            self._items.append(item)
            self._total_size += 1
            self._condition.notify()
        self._notify_signal()
        return True

    def requeue(self, item: T) -> None:
        """Puts an already accepted item at the back of the queue."""

        with self._condition:
            self._items.append(item)
            self._condition.notify()
        self._notify_signal()

    def pop(self, block: bool = True, timeout: Optional[float] = None) -> Optional[T]:
        """Next item, or ``None`` on timeout, when empty and non-blocking, or once drained."""

        with self._condition:
            if block:
                self._condition.wait_for(lambda: self._items or self._drained, timeout)
            if not self._items:
                return None
            return self._items.popleft()

    def drain(self) -> None:
        """Releases every blocked ``pop`` call."""

        with self._condition:
            self._drained = True
            self._condition.notify_all()

    def empty(self) -> bool:
        with self._condition:
            return not self._items

    def __len__(self) -> int:
        with self._condition:
            return len(self._items)

    def clear(self) -> None:
        with self._condition:
            self._items.clear()

    def reset(self) -> None:
        with self._condition:
            self._items.clear()
            self._total_size = 0
            self._drained = False
        self.filter.clear()

    def _notify_signal(self) -> None:
        if self._signal is not None:
            self._signal.notify()
