"""Base class for report components."""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Optional

from ..core.component import Component
from ..core.report import AuditStore


class Report(Component):
    """Formats an :class:`AuditStore`; ``has_outfile`` reports write to a file."""

    has_outfile: ClassVar[bool] = False
    extension: ClassVar[str] = ""

    def __init__(self, audit_store: AuditStore, options: Optional[Dict[str, Any]] = None) -> None:
        self.audit_store = audit_store
        self.options = dict(options or {})

    @property
    def outfile(self) -> Optional[str]:
        return self.options.get("outfile")

    def run(self) -> None:
        raise NotImplementedError
