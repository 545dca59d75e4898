"""Tests for the Dispatcher state machine and teardown."""

import threading

import pytest

from ajaxview.core.dispatcher import ActiveRequest, Dispatcher, RequestState
from ajaxview.core.models import Failure, RequestParameters, Success
from ajaxview.core.observers import BrowserObserver
from ajaxview.exceptions import EngineCreationError, EngineLoadError, SessionClosedError


class OutcomeRecorder:
    def __init__(self, dispatcher_ref):
        self.outcomes = []
        self.states = []
        self.threads = []
        self._dispatcher_ref = dispatcher_ref

    def __call__(self, params, outcome):
        self.outcomes.append((params.tag, outcome))
        self.states.append(self._dispatcher_ref[0].active_request.state)
        self.threads.append(threading.current_thread().name)


@pytest.fixture()
def dispatcher_and_recorder(engine, config):
    ref = []
    recorder = OutcomeRecorder(ref)
    dispatcher = Dispatcher(engine, config, recorder)
    ref.append(dispatcher)
    yield dispatcher, recorder
    dispatcher.shutdown()


def params(tag="page", **kwargs):
    return RequestParameters(tag=tag, url="https://ex.test/page", **kwargs)


class TestSubmit:
    def test_submit_returns_before_view_exists(self, engine, config):
        gate = threading.Event()
        original = engine.create_view

        def slow_create(settings, client):
            gate.wait(5)
            return original(settings, client)

        engine.create_view = slow_create
        dispatcher = Dispatcher(engine, config, lambda p, o: None)
        try:
            generation = dispatcher.submit(params())
            assert generation == 1
            assert engine.views == []
            gate.set()
            engine.wait_for_view()
        finally:
            gate.set()
            dispatcher.shutdown()

    def test_generations_increase(self, dispatcher_and_recorder):
        dispatcher, _ = dispatcher_and_recorder
        assert dispatcher.submit(params()) < dispatcher.submit(params())

    def test_rejects_other_types(self, dispatcher_and_recorder):
        dispatcher, _ = dispatcher_and_recorder
        with pytest.raises(TypeError):
            dispatcher.submit({"url": "https://ex.test/"})

    def test_submit_after_shutdown(self, engine, config):
        dispatcher = Dispatcher(engine, config, lambda p, o: None)
        dispatcher.shutdown()
        with pytest.raises(SessionClosedError):
            dispatcher.submit(params())

    def test_view_receives_request(self, engine, dispatcher_and_recorder):
        dispatcher, _ = dispatcher_and_recorder
        dispatcher.submit(params(headers={"Referer": "https://ex.test/"}))
        view = engine.wait_for_view()
        dispatcher.flush(5)
        assert view.loads == [("https://ex.test/page", {"Referer": "https://ex.test/"})]

    def test_post_request(self, engine, dispatcher_and_recorder):
        dispatcher, _ = dispatcher_and_recorder
        dispatcher.submit(params(method="POST", post_body=b"q=1"))
        view = engine.wait_for_view()
        dispatcher.flush(5)
        assert view.posts == [("https://ex.test/page", b"q=1")]
        assert view.loads == []


class TestStateMachine:
    def test_success_then_destroyed(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        generation = dispatcher.submit(params())
        view = engine.wait_for_view()
        dispatcher.flush(5)

        assert dispatcher.is_live(generation)
        dispatcher.deliver(generation, Success("<html></html>"))
        dispatcher.flush(5)

        assert recorder.states == [RequestState.SUCCEEDED]
        assert dispatcher.active_request is None
        assert not dispatcher.is_live(generation)
        assert view.destroy_count == 1

    def test_failure_then_destroyed(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        generation = dispatcher.submit(params())
        view = engine.wait_for_view()
        dispatcher.deliver(generation, Failure(EngineLoadError("net::ERR_FAILED")))
        dispatcher.flush(5)

        assert recorder.states == [RequestState.FAILED]
        assert view.destroy_count == 1

    def test_events_after_terminal_state_are_dropped(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        generation = dispatcher.submit(params())
        engine.wait_for_view()
        dispatcher.deliver(generation, Success("first"))
        dispatcher.deliver(generation, Success("second"))
        dispatcher.deliver(generation, Failure(EngineLoadError("late")))
        dispatcher.flush(5)

        assert [outcome for _, outcome in recorder.outcomes] == [Success("first")]

    def test_outcome_for_old_generation_is_dropped(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        first = dispatcher.submit(params("first"))
        dispatcher.submit(params("second"))
        engine.wait_for_view(1)
        dispatcher.deliver(first, Success("stale"))
        dispatcher.flush(5)
        assert recorder.outcomes == []

    def test_callbacks_run_on_dispatcher_thread(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        generation = dispatcher.submit(params())
        engine.wait_for_view()
        worker = threading.Thread(target=dispatcher.deliver, args=(generation, Success("x")))
        worker.start()
        worker.join()
        dispatcher.flush(5)
        assert recorder.threads == ["ajaxview-dispatcher"]

    def test_superseded_request_is_destroyed_silently(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        dispatcher.submit(params("first"))
        first_view = engine.wait_for_view(0)
        dispatcher.submit(params("second"))
        engine.wait_for_view(1)
        dispatcher.flush(5)

        assert first_view.destroy_count == 1
        assert recorder.outcomes == []
        assert dispatcher.active_request.params.tag == "second"


class TestCreationAndLoadFailures:
    def test_creation_error_reported_without_view(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        engine.create_error = EngineCreationError("no browser")
        dispatcher.submit(params())
        dispatcher.flush(5)

        [(tag, outcome)] = recorder.outcomes
        assert isinstance(outcome.error, EngineCreationError)
        assert engine.views == []
        assert dispatcher.active_request is None

    def test_unexpected_creation_error_is_wrapped(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        engine.create_error = OSError("executable not found")
        dispatcher.submit(params())
        dispatcher.flush(5)

        [(_, outcome)] = recorder.outcomes
        assert isinstance(outcome.error, EngineCreationError)
        assert isinstance(outcome.error.__cause__, OSError)

    def test_load_call_failure(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        original = engine.create_view

        def create_broken(settings, client):
            view = original(settings, client)

            def broken_load(url, headers):
                raise RuntimeError("renderer crashed")

            view.load_url = broken_load
            return view

        engine.create_view = create_broken
        dispatcher.submit(params())
        view = engine.wait_for_view()
        dispatcher.flush(5)

        [(_, outcome)] = recorder.outcomes
        assert isinstance(outcome.error, EngineLoadError)
        assert outcome.error.url == "https://ex.test/page"
        assert view.destroy_count == 1


class TestTeardown:
    def test_destroy_is_idempotent(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        dispatcher.submit(params())
        view = engine.wait_for_view()
        dispatcher.destroy()
        dispatcher.destroy()
        dispatcher.flush(5)

        assert view.destroy_count == 1
        assert recorder.outcomes == []

    def test_destroy_after_completion(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        generation = dispatcher.submit(params())
        view = engine.wait_for_view()
        dispatcher.deliver(generation, Success("done"))
        dispatcher.flush(5)
        dispatcher.destroy()
        dispatcher.flush(5)

        assert view.destroy_count == 1
        assert len(recorder.outcomes) == 1

    def test_destroy_without_request(self, dispatcher_and_recorder):
        dispatcher, _ = dispatcher_and_recorder
        dispatcher.destroy()
        assert dispatcher.flush(5)

    def test_queued_outcome_dropped_after_destroy(self, engine, dispatcher_and_recorder):
        dispatcher, recorder = dispatcher_and_recorder
        generation = dispatcher.submit(params())
        engine.wait_for_view()
        dispatcher.destroy()
        dispatcher.deliver(generation, Success("too late"))
        dispatcher.flush(5)
        assert recorder.outcomes == []

    def test_cancel_before_start_creates_nothing(self, engine, config):
        gate = threading.Event()
        dispatcher = Dispatcher(engine, config, lambda p, o: None)
        try:
            dispatcher.post(gate.wait, 5)
            dispatcher.submit(params())
            dispatcher.destroy()
            gate.set()
            dispatcher.flush(5)
            assert engine.views == []
        finally:
            gate.set()
            dispatcher.shutdown()

    def test_shutdown_is_idempotent(self, engine, config):
        dispatcher = Dispatcher(engine, config, lambda p, o: None)
        dispatcher.shutdown()
        dispatcher.shutdown()
        assert dispatcher.closed
        assert dispatcher.flush(1)


class TestDelayedWork:
    def test_post_delayed_runs_on_dispatcher_thread(self, dispatcher_and_recorder):
        dispatcher, _ = dispatcher_and_recorder
        ran = threading.Event()
        seen = []

        def record():
            seen.append(threading.current_thread().name)
            ran.set()

        dispatcher.post(dispatcher.post_delayed, 0.05, record)
        assert ran.wait(5)
        assert seen == ["ajaxview-dispatcher"]

    def test_shutdown_cancels_pending_timers(self, engine, config):
        dispatcher = Dispatcher(engine, config, lambda p, o: None)
        ran = threading.Event()
        dispatcher.post(dispatcher.post_delayed, 0.2, ran.set)
        dispatcher.flush(5)
        dispatcher.shutdown()
        assert not ran.wait(0.5)

    def test_handler_errors_do_not_stop_the_loop(self, dispatcher_and_recorder):
        dispatcher, _ = dispatcher_and_recorder
        ran = threading.Event()

        def explode():
            raise RuntimeError("bad handler")

        dispatcher.post(explode)
        dispatcher.post(ran.set)
        assert ran.wait(5)

    def test_destroy_cancels_request_timers(self, engine, dispatcher_and_recorder):
        dispatcher, _ = dispatcher_and_recorder
        ran = threading.Event()
        dispatcher.submit(params())
        engine.wait_for_view()
        dispatcher.post(dispatcher.post_delayed, 0.2, ran.set)
        dispatcher.flush(5)
        assert len(dispatcher._timers) == 1

        dispatcher.destroy()
        dispatcher.flush(5)

        assert dispatcher._timers == set()
        assert not ran.wait(0.5)


class TestObservers:
    def test_base_observer_is_abstract(self):
        with pytest.raises(TypeError):
            BrowserObserver(None, ActiveRequest(1, params()))
