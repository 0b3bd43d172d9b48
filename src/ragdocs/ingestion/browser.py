"""Process-wide headless browser shared by all HTML acquisitions.

The browser is started lazily on the first :meth:`BrowserManager.page`
call and lives until :meth:`BrowserManager.close` (process shutdown).
A browser that has disconnected (crashed) is relaunched on the next
call.  Each acquisition gets its own tab, which is always closed on exit
from the ``with`` block.

Playwright's sync API is bound to the thread that started it, so all
calls on one manager must come from the same thread.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from playwright.sync_api import sync_playwright

if TYPE_CHECKING:
    from playwright.sync_api import Browser, Page, Playwright

logger = logging.getLogger(__name__)


class BrowserManager:
    """Owns a single lazily-launched Chromium instance.

    Parameters
    ----------
    headless:
        Launch Chromium without a window (default ``True``).
    """

    def __init__(self, *, headless: bool = True) -> None:
        self._headless = headless
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = threading.Lock()

    @property
    def started(self) -> bool:
        return self._browser is not None

    def _ensure_browser(self) -> Browser:
        with self._lock:
            if self._browser is not None and not self._browser.is_connected():
                logger.warning("Headless Chromium disconnected, relaunching")
                self._browser = None
                self._stop_playwright()
            if self._browser is None:
                logger.info("Launching headless Chromium")
                self._playwright = sync_playwright().start()
                self._browser = self._playwright.chromium.launch(headless=self._headless)
            return self._browser

    def _stop_playwright(self) -> None:
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    @contextmanager
    def page(self) -> Iterator[Page]:
        """Open a fresh tab on the shared browser and close it afterwards."""
        browser = self._ensure_browser()
        tab = browser.new_page()
        try:
            yield tab
        finally:
            tab.close()

    def close(self) -> None:
        """Shut the browser down; a later :meth:`page` call relaunches it."""
        with self._lock:
            if self._browser is not None:
                logger.info("Closing headless Chromium")
                self._browser.close()
                self._browser = None
            self._stop_playwright()
