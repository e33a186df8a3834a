"""Reflected cross-site scripting through query parameters."""

from __future__ import annotations

import uuid

from ..core.models import Page
from .base import Check, mutate_query, query_parameters


class ReflectedXss(Check):
    """Injects a unique tag and reports parameters that echo it back unescaped."""

    name = "reflected_xss"
    order = 20
    severity = "high"
    info = {
        "issue": "Cross-Site Scripting (XSS)",
        "description": "Parameter input is echoed into the response without HTML encoding.",
        "author": "webaudit",
    }

    def run(self) -> None:
        for parameter, _ in query_parameters(self.page.url):
            tag = f"<wa{uuid.uuid4().hex[:8]}>"
            url = mutate_query(self.page.url, parameter, tag)
            self.http.queue(url, self._callback_for(url, parameter, tag))

    def _callback_for(self, url: str, parameter: str, tag: str):
        def analyze(response: Page) -> None:
            if tag in response.body:
                self.log_issue(url=url, parameter=parameter, proof=tag)

        return analyze
