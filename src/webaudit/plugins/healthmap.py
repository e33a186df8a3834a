"""Summarises the health of every URL in the sitemap."""

from __future__ import annotations

from .base import Plugin


class Healthmap(Plugin):
    """Splits the sitemap into URLs with and without issues once the scan stops."""

    name = "healthmap"
    info = {"description": "Generates a URL health summary.", "author": "webaudit"}

    def run(self) -> None:
        self.wait_while_framework_running()

        vulnerable = {issue.url.split("?", 1)[0] for issue in self.framework.checks.results()}
        entries = []
        for url in sorted(self.framework.sitemap):
            state = "with_issues" if url.split("?", 1)[0] in vulnerable else "without_issues"
            entries.append({"url": url, "state": state})

        with_issues = sum(1 for entry in entries if entry["state"] == "with_issues")
        total = len(entries)
        self.register_results(
            {
                "map": entries,
                "total": total,
                "with_issues": with_issues,
                "without_issues": total - with_issues,
                "issue_percentage": round(with_issues / total * 100, 2) if total else 0.0,
            }
        )
