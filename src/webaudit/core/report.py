"""Backwards-compatible exports for result data structures."""

from __future__ import annotations

from .artifacts import AuditStore
from .models import Issue

__all__ = [
    "AuditStore",
    "Issue",
]
