"""Result aggregate handed from the audit engine to the reports."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import Issue


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class AuditStore:
    """Structured data produced by a finished (or interrupted) scan."""

    options: Dict[str, Any] = field(default_factory=dict)
    sitemap: Dict[str, int] = field(default_factory=dict)
    issues: List[Issue] = field(default_factory=list)
    plugins: Dict[str, Any] = field(default_factory=dict)
    start_datetime: Optional[datetime] = None
    finish_datetime: Optional[datetime] = None

    @property
    def delta_time(self) -> str:
        """Elapsed scan time as ``HH:MM:SS``."""

        if not self.start_datetime:
            return "00:00:00"
        finish = self.finish_datetime or datetime.now()
        seconds = max(int((finish - self.start_datetime).total_seconds()), 0)
        hours, remainder = divmod(seconds, 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "options": self.options,
            "sitemap": dict(sorted(self.sitemap.items())),
            "issues": [issue.to_dict() for issue in self.issues],
            "plugins": self.plugins,
            "start_datetime": _isoformat(self.start_datetime),
            "finish_datetime": _isoformat(self.finish_datetime),
            "delta_time": self.delta_time,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=4, default=str)

    def save(self, path: Path) -> None:
        path.write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> "AuditStore":
        raw = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            options=dict(raw.get("options", {})),
            sitemap={url: int(code) for url, code in raw.get("sitemap", {}).items()},
            issues=[Issue.from_dict(entry) for entry in raw.get("issues", [])],
            plugins=dict(raw.get("plugins", {})),
            start_datetime=_parse_datetime(raw.get("start_datetime")),
            finish_datetime=_parse_datetime(raw.get("finish_datetime")),
        )
