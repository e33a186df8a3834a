"""Prints a summary of the scan results."""

from __future__ import annotations

from .base import Report


class StdoutReport(Report):
    """Prints the sitemap size and every issue to standard output."""

    name = "stdout"
    info = {"description": "Prints the audit results to the terminal.", "author": "webaudit"}

    def run(self) -> None:
        store = self.audit_store
        print(f"[*] Tempo de execução: {store.delta_time}")
        print(f"[*] {len(store.sitemap)} página(s) no sitemap")
        if not store.issues:
            print(" - Nenhuma vulnerabilidade encontrada.")
            return
        for issue in store.issues:
            where = f" ({issue.parameter})" if issue.parameter else ""
            print(f" - [{issue.severity.upper()}] {issue.name} :: {issue.url}{where}")
