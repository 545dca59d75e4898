#!/usr/bin/env python3
"""
Page event observers.

An observer is the WebViewClient attached to a browser view. It turns
raw engine events into outcomes for the Dispatcher. Engine callbacks may
arrive on any thread, so they only post work; everything that touches
the handle or request state runs on the dispatcher thread after a
liveness check against the request generation.

PageLoadObserver serves AJAX-fetch mode and returns the rendered HTML.
ResourceSniffObserver serves sniff mode and returns the first resource
URL matching the sniff pattern.
"""

import logging
from abc import ABC, abstractmethod

from ..browser.common.interface import WebViewClient
from ..exceptions import EngineLoadError, ScriptEvaluationError, SniffTimeoutError
from ..utils.script import OUTER_HTML_SCRIPT, unescape_script_result
from .models import Failure, Success

logger = logging.getLogger(__name__)


class BrowserObserver(WebViewClient, ABC):
    """Behaviour shared by both observers: errors, certificates, cookies."""

    def __init__(self, dispatcher, request):
        """
        Initialize an observer for one request.

        Args:
            dispatcher: Dispatcher that owns the request
            request: ActiveRequest record (not owned by the observer)
        """
        self._dispatcher = dispatcher
        self._request = request
        self._generation = request.generation
        self.params = request.params

    # Engine-thread entry points

    def on_load_finished(self, url):
        self._dispatcher.post(self._page_finished, url)

    def on_load_error(self, description, url=None):
        error = EngineLoadError(description, url or self.params.url)
        self._dispatcher.deliver(self._generation, Failure(error))

    def on_certificate_warning(self, warning):
        if self._dispatcher.config.proceed_on_certificate_error:
            logger.warning("Proceeding past certificate warning for %s: %s", warning.url, warning.description)
            warning.proceed()
        else:
            logger.warning("Rejecting page with certificate warning %s: %s", warning.url, warning.description)
            warning.cancel()

    # Dispatcher-thread work

    def on_started(self):
        """Called on the dispatcher thread once the load has been issued."""
        pass

    def is_live(self):
        return self._dispatcher.is_live(self._generation)

    def _page_finished(self, url):
        if not self.is_live():
            return
        self._forward_cookies(url)
        self.page_finished(url)

    @abstractmethod
    def page_finished(self, url):
        """Handle a finished page load for a live request."""
        pass

    def _forward_cookies(self, url):
        if self.params.cookie_sink is None:
            return
        try:
            cookie = self._request.handle.get_cookie(url)
            self.params.set_cookie(cookie)
        except Exception as e:
            logger.warning("Could not forward cookies for %s: %s", self.params.tag, e)


class PageLoadObserver(BrowserObserver):
    """Extracts the rendered document once the page has settled."""

    def page_finished(self, url):
        logger.debug("Page finished for %s: %s", self.params.tag, url)
        self._dispatcher.post_delayed(self._dispatcher.config.settle_delay, self._extract_document)

    def _extract_document(self):
        if not self.is_live():
            return
        future = self._request.handle.evaluate(OUTER_HTML_SCRIPT)
        future.add_done_callback(self._document_ready)

    def _document_ready(self, future):
        # May run on the engine thread
        if future.cancelled():
            outcome = Failure(ScriptEvaluationError("Document serialization was cancelled"))
        elif future.exception() is not None:
            error = ScriptEvaluationError(f"Document serialization failed: {future.exception()}")
            error.__cause__ = future.exception()
            outcome = Failure(error)
        else:
            html = unescape_script_result(future.result())
            if html:
                outcome = Success(html)
            else:
                outcome = Failure(ScriptEvaluationError("Document serialization returned no content"))
        self._dispatcher.deliver(self._generation, outcome)


class ResourceSniffObserver(BrowserObserver):
    """Reports the first resource URL that fully matches the sniff pattern."""

    def on_resource(self, url):
        if self.params.matches(url):
            logger.debug("Sniffed %s for %s", url, self.params.tag)
            self._dispatcher.deliver(self._generation, Success(url))

    def on_started(self):
        timeout = self._dispatcher.config.sniff_timeout
        if timeout:
            self._dispatcher.post_delayed(timeout, self._timed_out, timeout)

    def page_finished(self, url):
        if not self.params.has_script or self._request.script_consumed:
            return
        self._request.script_consumed = True
        self._dispatcher.post_delayed(self._dispatcher.config.settle_delay, self._run_script)

    def _run_script(self):
        if not self.is_live():
            logger.debug("Skipping post-load script for %s, view is gone", self.params.tag)
            return
        future = self._request.handle.evaluate(self.params.post_load_script)
        future.add_done_callback(self._script_done)

    def _script_done(self, future):
        if not future.cancelled() and future.exception() is not None:
            logger.warning("Post-load script for %s failed: %s", self.params.tag, future.exception())

    def _timed_out(self, timeout):
        if not self.is_live():
            return
        error = SniffTimeoutError(
            f"No resource matched {self.params.sniff_pattern!r} within {timeout}s"
        )
        self._dispatcher.deliver(self._generation, Failure(error))
