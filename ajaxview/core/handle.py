#!/usr/bin/env python3
"""
Browser handle module.

BrowserHandle wraps the single engine view used by one request. It
carries the request generation so late events can be matched against
the handle that is currently live, and makes teardown idempotent.
"""

import logging

from .models import RequestMethod

logger = logging.getLogger(__name__)


class BrowserHandle:
    """
    Owner-side wrapper around one engine view.

    Only the Dispatcher that created a handle may destroy it.
    """

    def __init__(self, view, generation):
        """
        Initialize a browser handle.

        Args:
            view: WebView created by the engine
            generation: Request generation this handle belongs to
        """
        self.view = view
        self.generation = generation
        self.destroyed = False

    def load(self, params):
        """Start loading the request described by ``params``."""
        if params.method is RequestMethod.POST:
            self.view.post_url(params.url, params.post_body)
        else:
            self.view.load_url(params.url, params.headers)

    def evaluate(self, script):
        return self.view.evaluate_script(script)

    def get_cookie(self, url):
        return self.view.get_cookie(url)

    def destroy(self):
        """
        Destroy the underlying view.

        Returns:
            bool: True if this call destroyed the view, False if it was already gone
        """
        if self.destroyed:
            return False
        self.destroyed = True
        try:
            self.view.destroy()
        finally:
            self.view = None
        logger.debug("Destroyed browser handle %d", self.generation)
        return True
