"""Error-based SQL injection detection."""

from __future__ import annotations

import re

from ..core.models import Page
from .base import Check, mutate_query, query_parameters

PAYLOAD = "'\"`"

ERROR_SIGNATURES = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"you have an error in your sql syntax",
        r"warning: mysql",
        r"unclosed quotation mark after the character string",
        r"quoted string not properly terminated",
        r"pg_query\(\): query failed",
        r"postgresql.*error",
        r"sqlite3?\.OperationalError",
        r"SQLITE_ERROR",
        r"ORA-\d{5}",
        r"Microsoft OLE DB Provider for SQL Server",
        r"SQLSTATE\[\w+\]",
    )
)


def matching_signature(body: str) -> str | None:
    for signature in ERROR_SIGNATURES:
        match = signature.search(body)
        if match:
            return match.group(0)
    return None


class SqlErrors(Check):
    """Injects quote characters into query parameters and looks for database errors."""

    name = "sql_errors"
    order = 10
    severity = "high"
    info = {
        "issue": "SQL Injection",
        "description": "A database error was triggered by a quote injected into a parameter.",
        "author": "webaudit",
    }

    def run(self) -> None:
        # Errors already present in the page would otherwise be reported for every parameter.
        if matching_signature(self.page.body):
            return

        for parameter, value in query_parameters(self.page.url):
            url = mutate_query(self.page.url, parameter, value + PAYLOAD)
            self.http.queue(url, self._callback_for(url, parameter))

    def _callback_for(self, url: str, parameter: str):
        def analyze(response: Page) -> None:
            proof = matching_signature(response.body)
            if proof:
                self.log_issue(url=url, parameter=parameter, proof=proof)

        return analyze
