"""Keeps the scan authenticated between audited pages."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..core.config import ScannerConfig
from ..http.client import HttpClient
from ..recon.targeting import ScopeFilter
from .login import browser_login

logger = logging.getLogger(__name__)

LoginCallable = Callable[[str, str, str], Optional[list]]


@dataclass
class Session:
    """Verifies the login state and logs back in when it has been lost."""

    config: ScannerConfig
    http: HttpClient
    scope: Optional[ScopeFilter] = None
    login: Optional[LoginCallable] = None

    def __post_init__(self) -> None:
        if self.scope is None:
            self.scope = ScopeFilter.for_target(self.config.target_url)
        if self.login is None:
            self.login = self._browser_login
        self._check_pattern = (
            re.compile(self.config.login_check_pattern)
            if self.config.login_check_pattern
            else None
        )

    @property
    def has_login_check(self) -> bool:
        return bool(self.config.login_check_url and self._check_pattern)

    @property
    def can_login(self) -> bool:
        return bool(self.config.auth_email and self.config.auth_password)

    def apply_session_cookie(self) -> bool:
        """Seeds the HTTP client with ``SESSION_COOKIE`` if one is configured."""

        if not self.config.session_cookie:
            return False

        assert self.scope is not None
        name, _, value = self.config.session_cookie.partition("=")
        if not name or not value:
            return False

        self.http.update_cookies(
            [{"name": name.strip(), "value": value.strip(), "domain": self.scope.target_hostname}]
        )
        return True

    def logged_in(self) -> bool:
        if not self.has_login_check:
            return True

        page = self.http.fetch(self.config.login_check_url)  # type: ignore[arg-type]
        return bool(self._check_pattern.search(page.body))  # type: ignore[union-attr]

    def ensure_logged_in(self) -> bool:
        if self.logged_in():
            return True

        logger.warning("Session lost, attempting to log back in.")
        if not self.can_login:
            logger.error("No credentials configured, cannot log back in.")
            return False

        cookies = self.login(  # type: ignore[misc]
            self.config.login_url, self.config.auth_email, self.config.auth_password
        )
        if not cookies:
            logger.error("Could not log back in.")
            return False

        self.http.update_cookies(self._filter(cookies))
        return self.logged_in()

    def _filter(self, cookies: Sequence[dict]) -> list[dict]:
        assert self.scope is not None
        return self.scope.filter_cookies(cookies)

    def _browser_login(self, login_url: str, email: str, password: str) -> Optional[list]:
        return browser_login(login_url, email, password, headless=self.config.headless)
