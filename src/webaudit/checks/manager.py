"""Loads checks and runs them against pages."""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Type

from ..core.component import ComponentManager
from ..core.models import Issue, Page
from ..http.client import HttpClient
from .base import Check, CheckContext
from .timing import TimingAuditor

logger = logging.getLogger(__name__)


class CheckManager(ComponentManager[Check]):
    kind = "Check"
    entry_point_group = "webaudit.checks"

    def __init__(
        self,
        http: HttpClient,
        builtins: Optional[Dict[str, Type[Check]]] = None,
    ) -> None:
        if builtins is None:
            from . import BUILTIN_CHECKS

            builtins = BUILTIN_CHECKS
        super().__init__(builtins)
        self.http = http
        self._issues: List[Issue] = []
        self._issue_keys: set[tuple] = set()
        self._lock = threading.Lock()
        self.timing = TimingAuditor(http, self.register_issue)

    def schedule(self) -> List[Type[Check]]:
        """Loaded checks in execution order."""

        return sorted(self._loaded.values(), key=lambda check: (check.order, check.name))

    def run_one(self, check: Type[Check], page: Page) -> None:
        instance = check(page, CheckContext(http=self.http, log_issue=self.register_issue, timing=self.timing))
        instance.prepare()
        try:
            instance.run()
        finally:
            instance.clean_up()

    def register_issue(self, issue: Issue) -> None:
        key = (issue.check, issue.url, issue.parameter)
        with self._lock:
            if key in self._issue_keys:
                return
            self._issue_keys.add(key)
            self._issues.append(issue)
        logger.info("[%s] %s at %s (%s)", issue.severity.upper(), issue.name, issue.url, issue.parameter or "-")

    def results(self) -> List[Issue]:
        with self._lock:
            return list(self._issues)

    def reset(self) -> None:
        self.clear()
        self.timing.clear()
        with self._lock:
            self._issues.clear()
            self._issue_keys.clear()
