"""Exception hierarchy shared by the scanner components."""

from __future__ import annotations


class WebAuditError(Exception):
    """Base class for every error raised by ``webaudit``."""


class ComponentError(WebAuditError):
    """Raised for check, report and plugin registry problems."""


class ComponentNotFoundError(ComponentError):
    """Raised when a component name does not match any registered component."""


class ComponentOptionsInvalidError(ComponentError):
    """Raised when a component cannot honour the requested options."""


class BrowserClusterError(WebAuditError):
    """Raised when the browser cluster cannot accept work."""
