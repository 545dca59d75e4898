#!/usr/bin/env python3
"""
Session module.

AjaxSession is the public entry point. It loads one RequestParameters at
a time through its Dispatcher and reports the outcome to a Callback:
exactly one of on_result or on_error fires per load, unless the load is
cancelled first.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError

from ..browser.common.interface import EngineFactory
from .config import SessionConfig
from .dispatcher import Dispatcher
from .models import Success

logger = logging.getLogger(__name__)


class Callback(ABC):
    """Receiver of the single outcome of a load."""

    @abstractmethod
    def on_result(self, result: str) -> None:
        """Called with the page HTML (AJAX mode) or the matched URL (sniff mode)."""
        pass

    @abstractmethod
    def on_error(self, error: BaseException) -> None:
        """Called with the error that ended the load."""
        pass


class AjaxSession:
    """
    Loads pages in a headless browser and reports one outcome per load.

    Callbacks run on the session's dispatcher thread.
    """

    def __init__(self, callback, engine=None, config=None):
        """
        Initialize a session.

        Args:
            callback: Callback receiving outcomes
            engine: Engine to create views with (created from config if None)
            config: SessionConfig (defaults if None)
        """
        self.callback = callback
        self.config = config or SessionConfig()
        self._owns_engine = engine is None
        if engine is None:
            engine = EngineFactory.create(
                engine=self.config.engine,
                headless=self.config.headless,
                type=self.config.browser_type,
                cookie_timeout=self.config.cookie_timeout,
            )
        self.engine = engine
        self.dispatcher = Dispatcher(engine, self.config, self._deliver)

    def load(self, params):
        """
        Start loading ``params`` without blocking.

        A non-empty sniff pattern selects sniff mode, otherwise the rendered
        HTML is returned. A load still in flight is cancelled.

        Returns:
            int: Generation number of the submitted request
        """
        return self.dispatcher.submit(params)

    def cancel(self):
        """Destroy the in-flight browser view; its callback will not fire."""
        self.dispatcher.destroy()

    def close(self):
        """Cancel pending work, stop the dispatcher and release the engine."""
        if self.dispatcher.closed:
            return
        self.dispatcher.shutdown()
        if self._owns_engine:
            self.engine.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _deliver(self, params, outcome):
        if self.callback is None:
            return
        if isinstance(outcome, Success):
            self.callback.on_result(outcome.payload)
        else:
            self.callback.on_error(outcome.error)


class FutureCallback(Callback):
    """Callback that resolves a concurrent.futures.Future."""

    def __init__(self):
        self.future = Future()

    def on_result(self, result):
        self.future.set_result(result)

    def on_error(self, error):
        self.future.set_exception(error)


def fetch(params, config=None, engine=None, timeout=None):
    """
    Load ``params`` and wait for the outcome.

    Args:
        params: RequestParameters describing the fetch
        config: SessionConfig (defaults if None)
        engine: Engine to use (created and shut down here if None)
        timeout: Maximum time to wait in seconds (None waits forever)

    Returns:
        str: Page HTML or the matched resource URL

    Raises:
        AjaxViewError: If the load failed
        TimeoutError: If no outcome arrived within ``timeout``
    """
    callback = FutureCallback()
    with AjaxSession(callback, engine=engine, config=config) as session:
        session.load(params)
        try:
            return callback.future.result(timeout=timeout)
        except FutureTimeoutError:
            logger.warning("No outcome for %s after %ss", params.tag, timeout)
            raise TimeoutError(f"Timed out after {timeout}s loading {params.url}")
