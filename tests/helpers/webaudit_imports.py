"""Centralized imports for the webaudit package used in tests."""

from webaudit.core import dependencies  # type: ignore[import]
from webaudit.core.config import (  # type: ignore[import]
    ScannerConfig,
    load_configuration,
)
from webaudit.core.models import DomState, Issue, Page, Transition  # type: ignore[import]
from webaudit.core.report import AuditStore  # type: ignore[import]
from webaudit.engine.orchestrator import ScanOrchestrator, ScanStatus  # type: ignore[import]

__all__ = [
    "AuditStore",
    "DomState",
    "Issue",
    "Page",
    "ScanOrchestrator",
    "ScanStatus",
    "ScannerConfig",
    "Transition",
    "dependencies",
    "load_configuration",
]
