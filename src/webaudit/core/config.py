"""Configuration loading utilities."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence
from urllib.parse import urljoin

from dotenv import load_dotenv

DEFAULT_DOM_DEPTH_LIMIT = 5
DEFAULT_BROWSER_POOL_SIZE = 4
DEFAULT_HTTP_TIMEOUT = 10
DEFAULT_HTTP_CONCURRENCY = 10


@dataclass(slots=True)
class ScannerConfig:
    """Holds runtime options for a full scan execution."""

    target_url: str
    report_path: Path = Path("webaudit_report.json")
    session_cookie: Optional[str] = None
    headless: bool = True
    auth_email: Optional[str] = None
    auth_password: Optional[str] = None
    login_check_url: Optional[str] = None
    login_check_pattern: Optional[str] = None
    dom_depth_limit: int = DEFAULT_DOM_DEPTH_LIMIT
    page_limit: Optional[int] = None
    restrict_paths: list[str] = field(default_factory=list)
    exclude_path_patterns: list[str] = field(default_factory=list)
    exclude_page_patterns: list[str] = field(default_factory=list)
    browser_pool_size: int = DEFAULT_BROWSER_POOL_SIZE
    http_timeout: int = DEFAULT_HTTP_TIMEOUT
    http_concurrency: int = DEFAULT_HTTP_CONCURRENCY
    checks: list[str] = field(default_factory=list)
    reports: list[str] = field(default_factory=list)
    plugins: list[str] = field(default_factory=list)

    @property
    def login_url(self) -> str:
        return urljoin(self.target_url, "/#/login")

    def page_limit_reached(self, count: int) -> bool:
        return bool(self.page_limit) and count >= self.page_limit  # type: ignore[operator]

    def to_dict(self) -> dict[str, Any]:
        """Snapshot used by the audit store, credentials excluded."""

        data = asdict(self)
        data["report_path"] = str(self.report_path)
        data.pop("auth_password", None)
        data.pop("session_cookie", None)
        return data


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return int(raw)


def _pick(value: Optional[int], env_name: str, default: Optional[int]) -> Optional[int]:
    if value is not None:
        return value
    env_value = _env_int(env_name)
    return env_value if env_value is not None else default


def load_configuration(
    target_url: str,
    report_name: str = "webaudit_report.json",
    *,
    dom_depth_limit: Optional[int] = None,
    page_limit: Optional[int] = None,
    browser_pool_size: Optional[int] = None,
    http_timeout: Optional[int] = None,
    restrict_paths: Sequence[str] = (),
    exclude_path_patterns: Sequence[str] = (),
    exclude_page_patterns: Sequence[str] = (),
    checks: Sequence[str] = (),
    reports: Sequence[str] = (),
    plugins: Sequence[str] = (),
) -> ScannerConfig:
    """Builds a ``ScannerConfig`` from CLI input and environment variables."""

    load_dotenv()  # Loads .env values if present

    return ScannerConfig(
        target_url=target_url.rstrip("/"),
        report_path=Path(report_name).resolve(),
        session_cookie=os.getenv("SESSION_COOKIE") or None,
        headless=_env_flag("HEADLESS", "true"),
        auth_email=os.getenv("EMAIL_LOGIN"),
        auth_password=os.getenv("PASSWORD_LOGIN"),
        login_check_url=os.getenv("LOGIN_CHECK_URL") or None,
        login_check_pattern=os.getenv("LOGIN_CHECK_PATTERN") or None,
        dom_depth_limit=_pick(dom_depth_limit, "DOM_DEPTH_LIMIT", DEFAULT_DOM_DEPTH_LIMIT),  # type: ignore[arg-type]
        page_limit=_pick(page_limit, "PAGE_LIMIT", None),
        browser_pool_size=_pick(browser_pool_size, "BROWSER_POOL_SIZE", DEFAULT_BROWSER_POOL_SIZE),  # type: ignore[arg-type]
        http_timeout=_pick(http_timeout, "HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),  # type: ignore[arg-type]
        restrict_paths=list(restrict_paths),
        exclude_path_patterns=list(exclude_path_patterns),
        exclude_page_patterns=list(exclude_page_patterns),
        checks=list(checks),
        reports=list(reports),
        plugins=list(plugins),
    )
