from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .errors import DocumentLoadError

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = logging.getLogger("domxpath.browser")

DEFAULT_TIMEOUT_MS = 30_000

_MISSING_BROWSER_ERROR_HINTS = (
    "executable doesn't exist",
    "executable does not exist",
    "download new browsers",
    "playwright install",
    "could not find browser",
    "failed to launch chromium because executable",
)


@dataclass(frozen=True, slots=True)
class RenderedPage:
    url: str
    status: int | None
    html: str


def is_missing_browser_error(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _MISSING_BROWSER_ERROR_HINTS)


def capture_page_html(page: Page, url: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> RenderedPage:
    response = page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
    status = response.status if response is not None else None
    if status is not None and status >= 400:
        raise DocumentLoadError(f"Failed to fetch URL (status {status}).")
    return RenderedPage(url=page.url, status=status, html=page.content())


def render_url(url: str, *, timeout_ms: int = DEFAULT_TIMEOUT_MS, headless: bool = True) -> RenderedPage:
    try:
        from playwright.sync_api import Error as PlaywrightError
        from playwright.sync_api import sync_playwright
    except ImportError as exc:
        raise DocumentLoadError(f"Playwright is not available: {exc}") from exc

    logger.info("Rendering %s with Chromium.", url)
    try:
        with sync_playwright() as playwright:
            browser = playwright.chromium.launch(headless=headless)
            try:
                page = browser.new_page()
                return capture_page_html(page, url, timeout_ms)
            finally:
                browser.close()
    except PlaywrightError as exc:
        if is_missing_browser_error(exc):
            raise DocumentLoadError(
                "Chromium is not installed for Playwright. Run `playwright install chromium`."
            ) from exc
        raise DocumentLoadError(f"Browser failed to load {url}: {exc}") from exc
