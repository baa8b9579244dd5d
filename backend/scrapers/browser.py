"""
Headless browser handle - one Chromium instance per process.

The handle is created at startup and injected wherever pages are rendered.
The browser itself is launched lazily on first render (or explicitly with
acquire()) and closed exactly once with release(); every render opens and
closes its own page against the shared browser.

Playwright's sync API is bound to the thread that started it, while Flask
serves each request on its own thread. Every browser call therefore runs on
a single dedicated worker thread owned by the handle; callers block on the
result.

Setup:
    pip install playwright && playwright install chromium
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional
from urllib.parse import urlsplit

from .errors import RenderError

logger = logging.getLogger(__name__)

# Resource types never needed to read chronicle pages
BLOCKED_RESOURCE_TYPES = {"stylesheet", "font"}


def _origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


class BrowserHandle:
    """Owned Playwright/Chromium resource with explicit lifecycle."""

    def __init__(
        self,
        executable_path: Optional[str] = None,
        timeout_ms: int = 30000,
        headless: bool = True,
    ):
        self.executable_path = executable_path
        self.timeout_ms = timeout_ms
        self.headless = headless
        self._playwright = None
        self._browser = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    @property
    def is_acquired(self) -> bool:
        return self._browser is not None

    def _run(self, fn, *args):
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="browser"
                )
            executor = self._executor
        return executor.submit(fn, *args).result()

    # =========================================================================
    # Public API (any thread)
    # =========================================================================

    def acquire(self):
        """Launch the browser if it is not running yet."""
        return self._run(self._acquire)

    def render(self, url: str) -> str:
        """
        Render a URL and return the resulting HTML.

        Raises:
            RenderError: If navigation fails or times out.
        """
        return self._run(self._render, url)

    def release(self) -> None:
        """Close the browser and stop the worker. Safe to call more than once."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is None:
            return
        try:
            executor.submit(self._release).result()
        finally:
            executor.shutdown(wait=True)

    # =========================================================================
    # Worker thread
    # =========================================================================

    def _acquire(self):
        if self._browser is None:
            from playwright.sync_api import sync_playwright

            logger.info("Launching headless Chromium...")
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                executable_path=self.executable_path,
                headless=self.headless,
            )
        return self._browser

    def _release(self) -> None:
        if self._browser is not None:
            try:
                logger.info("Closing headless Chromium...")
                self._browser.close()
            finally:
                self._browser = None
                if self._playwright is not None:
                    self._playwright.stop()
                    self._playwright = None

    def _enable_loading_optimization(self, page, url: str) -> None:
        """Abort stylesheets, fonts and cross-origin images."""
        page_origin = _origin(url)

        def handle_route(route):
            request = route.request
            if request.resource_type in BLOCKED_RESOURCE_TYPES or (
                request.resource_type == "image"
                and not request.url.startswith(page_origin)
            ):
                route.abort()
            else:
                route.continue_()

        page.route("**/*", handle_route)

    def _render(self, url: str) -> str:
        browser = self._acquire()
        page = browser.new_page()
        try:
            page.set_default_timeout(self.timeout_ms)
            self._enable_loading_optimization(page, url)
            page.goto(url, timeout=self.timeout_ms, wait_until="domcontentloaded")
            html = page.content()
            logger.debug(f"Rendered {url} ({len(html)} chars)")
            return html
        except Exception as e:
            raise RenderError(url, e) from e
        finally:
            page.close()
