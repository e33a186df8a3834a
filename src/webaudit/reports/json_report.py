"""Writes the scan results as JSON."""

from __future__ import annotations

import logging
from pathlib import Path

from .base import Report

logger = logging.getLogger(__name__)


class JsonReport(Report):
    """Serialises the audit store to a JSON file."""

    name = "json"
    has_outfile = True
    extension = "json"
    info = {"description": "Exports the audit results as JSON.", "author": "webaudit"}

    def run(self) -> None:
        path = Path(self.outfile or f"webaudit_report.{self.extension}")
        self.audit_store.save(path)
        logger.info("Saved JSON report to %s", path)
