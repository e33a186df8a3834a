from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Pattern, Sequence
from urllib.parse import urlparse

from ..core.models import Page

DEFAULT_EXCLUDED_HOST_KEYWORDS = frozenset({"github"})


def _compile(patterns: Sequence[str]) -> tuple[Pattern[str], ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


@dataclass(slots=True)
class ScopeFilter:
    """Encapsulates host allow-listing, exclusion rules and cookie filtering."""

    target_host: str
    target_hostname: str
    excluded_keywords: frozenset[str] = field(
        default_factory=lambda: DEFAULT_EXCLUDED_HOST_KEYWORDS
    )
    exclude_path_patterns: tuple[Pattern[str], ...] = ()
    exclude_page_patterns: tuple[Pattern[str], ...] = ()

    @classmethod
    def for_target(
        cls,
        target_url: str,
        *,
        exclude_path_patterns: Sequence[str] = (),
        exclude_page_patterns: Sequence[str] = (),
    ) -> "ScopeFilter":
        parsed = urlparse(target_url)
        return cls(
            target_host=parsed.netloc.lower(),
            target_hostname=(parsed.hostname or "").lower(),
            exclude_path_patterns=_compile(exclude_path_patterns),
            exclude_page_patterns=_compile(exclude_page_patterns),
        )

    def is_allowed(self, url: str) -> bool:
        try:
            parsed_url = urlparse(url)
        except ValueError:
            return False

        host = parsed_url.netloc.lower()
        hostname = (parsed_url.hostname or "").lower()

        if parsed_url.scheme and parsed_url.scheme not in {"http", "https", ""}:
            return False

        if host:
            if host != self.target_host and (
                not hostname or hostname != self.target_hostname
            ):
                return False
        elif hostname:
            if hostname != self.target_hostname:
                return False

        candidate = host or hostname
        if candidate and self._has_excluded_keyword(candidate):
            return False

        return True

    def skip_path(self, url: str) -> bool:
        if not self.is_allowed(url):
            return True
        return any(pattern.search(url) for pattern in self.exclude_path_patterns)

    def skip_page(self, page: Page) -> bool:
        if self.skip_path(page.dom.url):
            return True
        return any(pattern.search(page.body) for pattern in self.exclude_page_patterns)

    def _has_excluded_keyword(self, value: str) -> bool:
        if not value:
            return False
        normalized = value.lower()
        return any(keyword in normalized for keyword in self.excluded_keywords)

    def filter_cookies(self, cookies: Sequence[dict]) -> list[dict]:
        if not cookies:
            return []

        allowed: list[dict] = []
        allowed_domains = {value for value in (self.target_host, self.target_hostname) if value}
        suffix = f".{self.target_hostname}" if self.target_hostname else None

        for cookie in cookies:
            domain = (cookie.get("domain") or "").lstrip(".").lower()
            if not domain:
                continue

            if domain in allowed_domains or (suffix and domain.endswith(suffix)):
                allowed.append(cookie)

        return allowed
