"""Base class for plugins running alongside the scan."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from ..core.component import Component

if TYPE_CHECKING:  # pragma: no cover - import-time type checking only
    from ..engine.orchestrator import ScanOrchestrator


class Plugin(Component):
    """Runs on its own thread from ``prepare`` until the scan cleans up."""

    def __init__(self, framework: "ScanOrchestrator", options: Optional[Dict[str, Any]] = None) -> None:
        self.framework = framework
        self.options = dict(options or {})
        self.result: Any = None

    def prepare(self) -> None:
        pass

    def run(self) -> None:
        raise NotImplementedError

    def clean_up(self) -> None:
        pass

    def register_results(self, result: Any) -> None:
        self.result = result

    def wait_while_framework_running(self, timeout: Optional[float] = None) -> bool:
        return self.framework.wait_until_stopped(timeout)
