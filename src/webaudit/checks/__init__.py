"""Built-in audit checks."""

from .base import Check, CheckContext
from .manager import CheckManager
from .reflected_xss import ReflectedXss
from .sql_errors import SqlErrors
from .sql_timing import SqlTiming
from .timing import TimingAuditor, TimingCandidate

BUILTIN_CHECKS = {
    check.name: check
    for check in (SqlErrors, ReflectedXss, SqlTiming)
}

__all__ = [
    "BUILTIN_CHECKS",
    "Check",
    "CheckContext",
    "CheckManager",
    "ReflectedXss",
    "SqlErrors",
    "SqlTiming",
    "TimingAuditor",
    "TimingCandidate",
]
