#!/usr/bin/env python3
"""
Dispatcher module.

The Dispatcher is the single serialized execution context of a session.
Engine events arrive on whatever thread the engine uses; observers post
them here, and a dedicated thread handles them one at a time. Every
state change of a request and every caller callback happens on that
thread, so no locking is needed around request state.

Per request the state moves IDLE -> STARTED -> SUCCEEDED | FAILED ->
DESTROYED. Events for a request that is no longer STARTED are dropped.
"""

import itertools
import logging
import threading
from enum import Enum
from queue import Empty, Queue

from ..exceptions import EngineCreationError, EngineLoadError, SessionClosedError
from .handle import BrowserHandle
from .models import Failure, RequestParameters, Success
from .observers import PageLoadObserver, ResourceSniffObserver

logger = logging.getLogger(__name__)


class RequestState(Enum):
    IDLE = "idle"
    STARTED = "started"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DESTROYED = "destroyed"


class ActiveRequest:
    """
    Dispatcher-side record of one submitted request.

    Only the dispatcher thread reads or writes its fields.
    """

    def __init__(self, generation, params):
        self.generation = generation
        self.params = params
        self.state = RequestState.IDLE
        self.handle = None
        self.script_consumed = False
        self.timers = set()

    @property
    def mode(self):
        return "sniff" if self.params.is_sniff else "ajax"


class Dispatcher:
    """
    Serializes engine events and delivers exactly one outcome per request.

    The dispatcher owns at most one live BrowserHandle at a time.
    """

    def __init__(self, engine, config, on_outcome):
        """
        Initialize the dispatcher and start its thread.

        Args:
            engine: Engine used to create browser views
            config: SessionConfig instance
            on_outcome: Called as on_outcome(params, outcome) on the dispatcher thread
        """
        self.engine = engine
        self.config = config
        self._on_outcome = on_outcome

        self._queue = Queue()
        self._request = None
        self._timers = set()
        self._generations = itertools.count(1)
        self._latest_generation = 0
        self._cancelled_upto = 0
        self._running = True
        self._closed = False

        self._thread = threading.Thread(target=self._run, name="ajaxview-dispatcher")
        self._thread.daemon = True
        self._thread.start()

    # ------------------------------------------------------------------
    # Thread-safe entry points
    # ------------------------------------------------------------------

    def submit(self, params):
        """
        Queue a request for loading and return immediately.

        Args:
            params: RequestParameters describing the fetch

        Returns:
            int: Generation number identifying the request

        Raises:
            SessionClosedError: If the dispatcher has been shut down
        """
        if self._closed:
            raise SessionClosedError("Cannot load a request on a closed session")
        if not isinstance(params, RequestParameters):
            raise TypeError(f"Expected RequestParameters, got {type(params).__name__}")

        generation = next(self._generations)
        self._latest_generation = generation
        self.post(self._handle_start, generation, params)
        return generation

    def post(self, func, *args):
        """Queue ``func(*args)`` for execution on the dispatcher thread."""
        self._queue.put((func, args))

    def deliver(self, generation, outcome):
        """Queue a terminal outcome for the request with ``generation``."""
        self.post(self._handle_outcome, generation, outcome)

    def destroy(self):
        """
        Tear down the in-flight request, if any, without a callback.

        Outcomes already queued for it are dropped. Safe to call repeatedly.
        """
        self._cancelled_upto = self._latest_generation
        self.post(self._handle_destroy)

    def flush(self, timeout=None):
        """
        Block until every queued message, and anything it queued in turn, has run.

        Work still waiting on a timer (settle delays, sniff timeouts) is not
        waited for.

        Args:
            timeout: Maximum time to wait in seconds (None waits forever)

        Returns:
            bool: True if the dispatcher went idle in time
        """
        if threading.current_thread() is self._thread:
            raise RuntimeError("flush() cannot be called from the dispatcher thread")
        if not self._thread.is_alive():
            return True
        idle = threading.Event()
        self.post(self._check_idle, idle)
        return idle.wait(timeout)

    def shutdown(self, timeout=5):
        """Cancel pending work and stop the dispatcher thread."""
        if self._closed:
            return
        self._closed = True
        self.destroy()
        self.post(self._handle_shutdown)
        if threading.current_thread() is not self._thread:
            self._thread.join(timeout=timeout)

    @property
    def closed(self):
        return self._closed

    # ------------------------------------------------------------------
    # Dispatcher-thread helpers
    # ------------------------------------------------------------------

    def post_delayed(self, delay, func, *args):
        """
        Run ``func(*args)`` on the dispatcher thread after ``delay`` seconds.

        Must be called from the dispatcher thread. A timer set while a request
        is active belongs to it and is cancelled when the request is destroyed.
        """
        if delay <= 0:
            self.post(func, *args)
            return

        owner = self._request

        def fire():
            self.post(self._timer_fired, timer, owner, func, args)

        timer = threading.Timer(delay, fire)
        timer.daemon = True
        self._timers.add(timer)
        if owner is not None:
            owner.timers.add(timer)
        timer.start()

    def is_live(self, generation):
        """Return True while the request with ``generation`` can still finish."""
        request = self._request
        return (
            request is not None
            and request.generation == generation
            and request.state is RequestState.STARTED
            and generation > self._cancelled_upto
        )

    @property
    def active_request(self):
        return self._request

    # ------------------------------------------------------------------
    # Message handlers
    # ------------------------------------------------------------------

    def _run(self):
        while self._running:
            func, args = self._queue.get()
            try:
                func(*args)
            except Exception:
                logger.exception("Unhandled error in dispatcher message %s", getattr(func, "__name__", func))
            finally:
                self._queue.task_done()

    def _handle_start(self, generation, params):
        if generation <= self._cancelled_upto:
            logger.debug("Request %d was cancelled before it started", generation)
            return

        if self._request is not None:
            logger.warning(
                "Request %s superseded by %s before finishing",
                self._request.params.tag, params.tag,
            )
            self._destroy_request(self._request)

        request = ActiveRequest(generation, params)
        self._request = request
        request.state = RequestState.STARTED
        logger.info("Starting %s request %s: %s %s", request.mode, params.tag, params.method.value, params.url)

        if params.is_sniff:
            observer = ResourceSniffObserver(self, request)
        else:
            observer = PageLoadObserver(self, request)

        settings = self.config.to_view_settings(params.user_agent)
        try:
            view = self.engine.create_view(settings, observer)
        except EngineCreationError as e:
            self._finish(request, Failure(e))
            return
        except Exception as e:
            error = EngineCreationError(f"Could not create browser view: {e}")
            error.__cause__ = e
            self._finish(request, Failure(error))
            return

        request.handle = BrowserHandle(view, generation)
        try:
            request.handle.load(params)
        except Exception as e:
            error = EngineLoadError(str(e), params.url)
            error.__cause__ = e
            self._finish(request, Failure(error))
            return

        observer.on_started()

    def _handle_outcome(self, generation, outcome):
        if not self.is_live(generation):
            logger.debug("Dropping %s for request %d, already finished", type(outcome).__name__, generation)
            return
        self._finish(self._request, outcome)

    def _finish(self, request, outcome):
        params = request.params
        if isinstance(outcome, Success):
            request.state = RequestState.SUCCEEDED
            logger.info("Request %s succeeded (%d chars)", params.tag, len(outcome.payload))
        else:
            request.state = RequestState.FAILED
            logger.info("Request %s failed: %s", params.tag, outcome.error)

        try:
            self._on_outcome(params, outcome)
        except Exception:
            logger.exception("Callback for request %s raised", params.tag)
        finally:
            self._destroy_request(request)

    def _destroy_request(self, request):
        handle, request.handle = request.handle, None
        request.state = RequestState.DESTROYED
        for timer in request.timers:
            timer.cancel()
            self._timers.discard(timer)
        request.timers.clear()
        if self._request is request:
            self._request = None
        if handle is not None:
            try:
                handle.destroy()
            except Exception as e:
                logger.warning("Error destroying browser view for %s: %s", request.params.tag, e)

    def _handle_destroy(self):
        if self._request is not None:
            logger.info("Cancelling request %s", self._request.params.tag)
            self._destroy_request(self._request)

    def _timer_fired(self, timer, owner, func, args):
        if timer not in self._timers:
            return
        self._timers.discard(timer)
        if owner is not None:
            owner.timers.discard(timer)
        func(*args)

    def _check_idle(self, idle):
        if self._queue.empty():
            idle.set()
        else:
            self.post(self._check_idle, idle)

    def _handle_shutdown(self):
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()
        self._running = False
        # Anything still queued belongs to cancelled work
        try:
            while True:
                self._queue.get_nowait()
                self._queue.task_done()
        except Empty:
            pass
        logger.debug("Dispatcher stopped")
