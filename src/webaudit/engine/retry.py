"""Bounded re-fetch policy for resources that elicit no response."""

from __future__ import annotations

import logging
import threading
from typing import Hashable

logger = logging.getLogger(__name__)

# How many times to request a page upon failure.
AUDIT_PAGE_MAX_TRIES = 5


class RetryTracker:
    """Counts network failures per fingerprint and records the give-ups.

    Status code ``0`` is a network failure, not an HTTP error, and is the
    only outcome tracked here.
    """

    def __init__(self, max_tries: int = AUDIT_PAGE_MAX_TRIES) -> None:
        self.max_tries = max_tries
        self._attempts: dict[Hashable, int] = {}
        self._failures: list[str] = []
        self._given_up: set[str] = set()
        self._lock = threading.Lock()

    @property
    def failures(self) -> list[str]:
        with self._lock:
            return list(self._failures)

    def attempts(self, fingerprint: Hashable) -> int:
        with self._lock:
            return self._attempts.get(fingerprint, 0)

    def register_failure(self, url: str) -> bool:
        """Returns ``True`` if ``url`` should be queued again."""

        with self._lock:
            if url in self._given_up:
                return False
            attempts = self._attempts.get(url, 0)
            if attempts >= self.max_tries:
                self._failures.append(url)
                self._given_up.add(url)
                self._attempts.pop(url, None)
                give_up = True
            else:
                self._attempts[url] = attempts + 1
                give_up = False

        if give_up:
            logger.error(
                "Giving up trying to audit: %s (no response after %d tries)",
                url,
                self.max_tries,
            )
            return False

        logger.warning("Retrying for: %s", url)
        return True

    def register_success(self, url: str) -> None:
        with self._lock:
            self._attempts.pop(url, None)

    def clear(self) -> None:
        with self._lock:
            self._attempts.clear()
            self._failures.clear()
            self._given_up.clear()
