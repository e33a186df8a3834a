"""Verification pass for timing-attack candidates."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List

from ..core.models import Issue

if TYPE_CHECKING:  # pragma: no cover - import-time type checking only
    from ..http.client import HttpClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimingCandidate:
    """A response that took suspiciously long and still needs confirming."""

    check: str
    name: str
    url: str
    control_url: str
    parameter: str
    delay: float
    severity: str = "high"
    description: str = ""


class TimingAuditor:
    """Collects timing candidates and re-validates them on demand.

    A candidate is confirmed when the payload request is delayed again and the
    control request is not.
    """

    def __init__(self, http: "HttpClient", log_issue: Callable[[Issue], None]) -> None:
        self.http = http
        self._log_issue = log_issue
        self._candidates: List[TimingCandidate] = []
        self._lock = threading.Lock()

    def add(self, candidate: TimingCandidate) -> None:
        with self._lock:
            self._candidates.append(candidate)

    def has_candidates(self) -> bool:
        with self._lock:
            return bool(self._candidates)

    def run(self) -> List[Issue]:
        with self._lock:
            candidates, self._candidates = self._candidates, []

        confirmed: List[Issue] = []
        for candidate in candidates:
            if not self._verify(candidate):
                logger.info("Timing candidate did not verify: %s", candidate.url)
                continue

            issue = Issue(
                check=candidate.check,
                name=candidate.name,
                url=candidate.url,
                severity=candidate.severity,
                parameter=candidate.parameter,
                description=candidate.description,
                proof=f"Response delayed by at least {candidate.delay:.0f}s",
            )
            self._log_issue(issue)
            confirmed.append(issue)
        return confirmed

    def clear(self) -> None:
        with self._lock:
            self._candidates.clear()

    def _verify(self, candidate: TimingCandidate) -> bool:
        timeout = candidate.delay + self.http.timeout
        delayed = self.http.request(candidate.url, timeout=timeout)
        if delayed.code == 0 or delayed.response_time < candidate.delay:
            return False

        control = self.http.request(candidate.control_url, timeout=timeout)
        return control.code != 0 and control.response_time < candidate.delay
