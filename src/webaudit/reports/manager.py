"""Loads and runs report components."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type

from ..core.component import ComponentManager
from ..core.report import AuditStore
from .base import Report

logger = logging.getLogger(__name__)


class ReportManager(ComponentManager[Report]):
    kind = "Report"
    entry_point_group = "webaudit.reports"

    def __init__(
        self,
        builtins: Optional[Dict[str, Type[Report]]] = None,
        default_options: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> None:
        if builtins is None:
            from . import BUILTIN_REPORTS

            builtins = BUILTIN_REPORTS
        super().__init__(builtins)
        self.default_options = dict(default_options or {})

    def run(self, audit_store: AuditStore) -> None:
        for name in self.loaded:
            try:
                self.run_one(name, audit_store, self.default_options.get(name))
            except Exception:
                logger.exception("Report '%s' failed", name)

    def run_one(
        self,
        name: str,
        audit_store: AuditStore,
        options: Optional[Dict[str, Any]] = None,
    ) -> Report:
        report = self[name](audit_store, options)
        report.run()
        return report
