"""Availability checks for the headless browser used by the browser cluster."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

logger = logging.getLogger(__name__)


def check_browser() -> bool:
    """Returns ``True`` if Playwright has a Chromium build installed."""

    try:
        with sync_playwright() as playwright:
            executable = playwright.chromium.executable_path
    except PlaywrightError:
        logger.debug("Playwright could not resolve a Chromium executable", exc_info=True)
        return False

    return bool(executable) and Path(executable).exists()


@lru_cache(maxsize=1)
def has_browser_executable() -> bool:
    return check_browser()


def verify_dependencies() -> dict[str, bool]:
    """Checks each required tool and returns a mapping with the result."""

    return {"chromium (playwright)": check_browser()}
