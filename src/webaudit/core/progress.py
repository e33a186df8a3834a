"""Progress and ETA helpers for the stats surface."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

UNKNOWN_ETA = "--:--:--"


def compute_progress(audited: int, discovered: int) -> float:
    """Audited pages over discovered pages, as a percentage in ``[0, 100]``."""

    if discovered <= 0:
        return 0.0

    progress = round(float(audited) / discovered * 100, 2)
    # The audit count can briefly overtake the sitemap while browser pages
    # are being merged in.
    return min(max(progress, 0.0), 100.0)


def eta(progress: float, start: datetime, now: Optional[datetime] = None) -> str:
    if progress <= 0:
        return UNKNOWN_ETA

    now = now or datetime.now()
    elapsed = max((now - start).total_seconds(), 0.0)
    remaining = int(elapsed / progress * (100.0 - progress))
    hours, remainder = divmod(remaining, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
