"""Blind SQL injection through response delays."""

from __future__ import annotations

from ..core.models import Page
from .base import Check, mutate_query, query_parameters
from .timing import TimingCandidate

DELAY = 4

PAYLOADS = (
    "' AND SLEEP({delay})-- -",
    " AND SLEEP({delay})",
    "'; WAITFOR DELAY '0:0:{delay}'--",
    "' || pg_sleep({delay})--",
)


class SqlTiming(Check):
    """Queues delay payloads; slow responses become timing candidates."""

    name = "sql_timing"
    order = 90
    severity = "high"
    delay = DELAY
    info = {
        "issue": "Blind SQL Injection (timing attack)",
        "description": "Injected delay statements consistently delayed the response.",
        "author": "webaudit",
    }

    def run(self) -> None:
        for parameter, value in query_parameters(self.page.url):
            control_url = mutate_query(self.page.url, parameter, value)
            for template in PAYLOADS:
                url = mutate_query(self.page.url, parameter, value + template.format(delay=self.delay))
                self.http.queue(url, self._callback_for(url, control_url, parameter))

    def _callback_for(self, url: str, control_url: str, parameter: str):
        def analyze(response: Page) -> None:
            if response.code == 0 or response.response_time < self.delay:
                return
            self.context.timing.add(
                TimingCandidate(
                    check=self.name,
                    name=self.info["issue"],
                    url=url,
                    control_url=control_url,
                    parameter=parameter,
                    delay=self.delay,
                    severity=self.severity,
                    description=self.info["description"],
                )
            )

        return analyze
