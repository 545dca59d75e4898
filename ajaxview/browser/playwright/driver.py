#!/usr/bin/env python3
"""
Playwright rendering engine module.

PlaywrightEngine runs the Playwright async API on a private event loop
in its own thread. Every view it creates is a separate browser instance
with one context and one page; page events are reported to the view's
WebViewClient from that engine thread.
"""

import asyncio
import concurrent.futures
import json
import logging
import threading

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ...exceptions import EngineCreationError
from ...utils.http import format_cookie_header
from ..common.interface import Engine, WebView
from ..utils import build_browser_args

logger = logging.getLogger(__name__)


def describe_error(error):
    """
    Reduce a Playwright error to the engine's own description.

    "page.goto: net::ERR_TIMED_OUT at https://x/\\nCall log: ..." becomes
    "net::ERR_TIMED_OUT at https://x/".
    """
    message = getattr(error, "message", None) or str(error)
    first_line = message.strip().splitlines()[0] if message.strip() else repr(error)
    prefix, sep, rest = first_line.partition(": ")
    if sep and "." in prefix and " " not in prefix:
        return rest
    return first_line


def _close_abandoned_browser(launch):
    """Close a browser whose launch finished after create_view gave up on it."""
    if launch.cancelled() or launch.exception() is not None:
        return
    launch.get_loop().create_task(launch.result().close())


class PlaywrightEngine(Engine):
    """Rendering engine backed by Playwright."""

    def __init__(self, headless=True, browser_type="chromium", cookie_timeout=5.0, start_timeout=60):
        """
        Initialize the engine. Playwright itself starts with the first view.

        Args:
            headless: Whether to run browsers in headless mode
            browser_type: Browser to use ("chromium", "chrome", "firefox", or "webkit")
            cookie_timeout: Seconds to wait when reading a view's cookies
            start_timeout: Seconds to wait for Playwright and browser startup
        """
        self.headless = headless
        self.browser_type = browser_type
        self.cookie_timeout = cookie_timeout
        self.start_timeout = start_timeout

        self._loop = None
        self._thread = None
        self._playwright = None
        self._lock = threading.Lock()

    @property
    def running(self):
        return self._loop is not None and not self._loop.is_closed()

    def _ensure_started(self):
        with self._lock:
            if self._loop is not None:
                return

            loop = asyncio.new_event_loop()
            ready = threading.Event()

            def run():
                asyncio.set_event_loop(loop)
                loop.call_soon(ready.set)
                loop.run_forever()

            thread = threading.Thread(target=run, name="ajaxview-playwright")
            thread.daemon = True
            thread.start()
            ready.wait()

            self._loop = loop
            self._thread = thread
            try:
                self._playwright = self.call(async_playwright().start(), timeout=self.start_timeout)
            except Exception:
                self._stop_loop()
                raise
            logger.debug("Playwright started")

    def _stop_loop(self):
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        self._loop.close()
        self._loop = None
        self._thread = None
        self._playwright = None

    def submit(self, coro):
        """Schedule ``coro`` on the engine loop and return a concurrent future."""
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def call(self, coro, timeout=None):
        """Run ``coro`` on the engine loop and wait for its result."""
        return self.submit(coro).result(timeout)

    def create_view(self, settings, client):
        try:
            self._ensure_started()
            future = self.submit(self._open_view(settings, client))
            try:
                return future.result(self.start_timeout)
            except concurrent.futures.TimeoutError:
                # Cancelling the task makes _open_view close what it launched
                future.cancel()
                raise
        except Exception as e:
            raise EngineCreationError(f"Failed to create Playwright browser: {e}") from e

    async def _open_view(self, settings, client):
        launch_options = {"headless": self.headless}

        if self.browser_type == "firefox":
            launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            launcher = self._playwright.webkit
        else:
            launcher = self._playwright.chromium
            launch_options["args"] = build_browser_args(self.headless, settings.mixed_content_policy)
            if self.browser_type == "chrome":
                launch_options["channel"] = "chrome"

        launch = asyncio.ensure_future(launcher.launch(**launch_options))
        try:
            browser = await asyncio.shield(launch)
        except asyncio.CancelledError:
            launch.add_done_callback(_close_abandoned_browser)
            raise
        try:
            context = await browser.new_context(
                user_agent=settings.user_agent,
                viewport={"width": 1920, "height": 1080},
                java_script_enabled=settings.scripting_enabled,
                ignore_https_errors=settings.ignore_certificate_errors,
                locale="en-US",
            )
            context.set_default_timeout(settings.page_load_timeout)
            page = await context.new_page()
            view = PlaywrightView(self, browser, context, page, client, settings)
            await view.attach()
        except BaseException:
            # Includes cancellation after a create_view timeout
            await asyncio.shield(browser.close())
            raise
        return view

    def shutdown(self):
        if self._loop is None:
            return
        try:
            if self._playwright is not None:
                self.call(self._playwright.stop(), timeout=10)
        except Exception as e:
            logger.warning("Error stopping Playwright: %s", e)
        finally:
            self._stop_loop()


class PlaywrightView(WebView):
    """One Playwright browser, context and page reporting to a client."""

    def __init__(self, engine, browser, context, page, client, settings):
        self._engine = engine
        self._browser = browser
        self._context = context
        self._page = page
        self._client = client
        self._settings = settings
        self._pending_post = None
        self._closed = False

    async def attach(self):
        """Wire page events and request routing to the client."""
        self._page.on("load", self._on_load)
        self._page.on("request", self._on_request)
        await self._page.route("**/*", self._route)

    def _on_load(self, page):
        if not self._closed:
            self._client.on_load_finished(page.url)

    def _on_request(self, request):
        if not self._closed:
            self._client.on_resource(request.url)

    async def _route(self, route):
        request = route.request
        body = self._pending_post
        if (
            body is not None
            and request.is_navigation_request()
            and request.frame == self._page.main_frame
        ):
            # Turn the first main-frame navigation into the POST
            self._pending_post = None
            headers = dict(request.headers)
            headers.setdefault("content-type", "application/x-www-form-urlencoded")
            await route.continue_(method="POST", post_data=body, headers=headers)
        elif self._settings.image_loading_disabled and request.resource_type == "image":
            await route.abort()
        else:
            await route.continue_()

    def load_url(self, url, headers):
        self._engine.submit(self._navigate(url, headers))

    def post_url(self, url, body):
        self._pending_post = body
        self._engine.submit(self._navigate(url))

    async def _navigate(self, url, headers=None):
        try:
            extra = {
                name: value
                for name, value in (headers or {}).items()
                if name.lower() != "user-agent"
            }
            if extra:
                await self._page.set_extra_http_headers(extra)
            await self._page.goto(url, wait_until="load", timeout=self._settings.page_load_timeout)
        except PlaywrightError as e:
            if not self._closed:
                self._client.on_load_error(describe_error(e), url)

    def evaluate_script(self, script):
        return self._engine.submit(self._evaluate(script))

    async def _evaluate(self, script):
        result = await self._page.evaluate(script)
        return json.dumps(result)

    def get_cookie(self, url):
        cookies = self._engine.call(self._context.cookies(url), timeout=self._engine.cookie_timeout)
        return format_cookie_header(cookies)

    def destroy(self):
        if self._closed:
            return
        self._closed = True
        if self._engine.running:
            self._engine.submit(self._close())

    async def _close(self):
        for close in (self._page.close, self._context.close, self._browser.close):
            try:
                await close()
            except PlaywrightError as e:
                logger.debug("Error during close: %s", e)
