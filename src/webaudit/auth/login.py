"""Browser-driven form login used to (re)establish a scan session."""

from __future__ import annotations

import logging
from typing import Optional

from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

logger = logging.getLogger(__name__)

EMAIL_SELECTOR = "input[name='email'], input[type='email'], input[name='username']"
PASSWORD_SELECTOR = "input[type='password']"


def _close_overlays(page: Page) -> None:
    """Best-effort dismissal for cookie banners and welcome dialogs."""

    selectors = (
        "button[aria-label='Close Welcome Banner']",
        ".cc-btn.cc-dismiss",
        ".cdk-overlay-backdrop",
    )
    for selector in selectors:
        try:
            locator = page.locator(selector)
            if locator.count() > 0:
                locator.first.click(timeout=2000)
        except PlaywrightTimeoutError:
            continue

    try:
        page.keyboard.press("Escape")
    except Exception:
        logger.debug("Escape key press failed on %s", page.url, exc_info=True)


def login_with_credentials(page: Page, login_url: str, email: str, password: str) -> Optional[list[dict]]:
    """Attempts a login using the provided credentials and returns cookies."""

    try:
        page.goto(login_url)
        _close_overlays(page)

        page.wait_for_selector(EMAIL_SELECTOR, timeout=10000)
        page.locator(EMAIL_SELECTOR).first.fill(email)
        page.locator(PASSWORD_SELECTOR).first.fill(password)
        page.locator(PASSWORD_SELECTOR).first.press("Enter")

        page.wait_for_url(lambda current: current != login_url and "login" not in current, timeout=7000)
        return page.context.cookies()
    except PlaywrightTimeoutError:
        logger.warning("Login timed out at %s", login_url)
        return None
    except Exception:
        logger.warning("Login failed at %s", login_url, exc_info=True)
        return None


def browser_login(login_url: str, email: str, password: str, *, headless: bool = True) -> Optional[list[dict]]:
    """Runs ``login_with_credentials`` in a short-lived browser."""

    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(headless=headless)
        try:
            page = browser.new_context().new_page()
            return login_with_credentials(page, login_url, email, password)
        finally:
            browser.close()
