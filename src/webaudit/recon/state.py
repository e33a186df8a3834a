from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class CrawlerRuntimeState:
    """Mutable runtime bookkeeping for the spider."""

    seen_urls: set[str] = field(default_factory=set)
    visited_urls: set[str] = field(default_factory=set)
    failed_urls: set[str] = field(default_factory=set)
    visited_count: int = 0
