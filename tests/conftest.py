"""ajaxview test configuration: a scriptable fake engine and shared fixtures."""

import json
import threading
from concurrent.futures import Future

import pytest

from ajaxview.browser.common.interface import CertificateWarning, Engine, WebView
from ajaxview.core.config import SessionConfig
from ajaxview.core.session import AjaxSession, Callback
from ajaxview.utils.script import OUTER_HTML_SCRIPT

DEFAULT_DOCUMENT = '<html><head></head><body><a href="/next">next</a></body></html>'


# ---------------------------------------------------------------------------
# Fake engine
# ---------------------------------------------------------------------------


class FakeCertificateWarning(CertificateWarning):
    def __init__(self, url, description="certificate has expired"):
        super().__init__(url, description)
        self.proceeded = False
        self.cancelled = False

    def proceed(self):
        self.proceeded = True

    def cancel(self):
        self.cancelled = True


class FakeView(WebView):
    """Records every call and lets tests fire engine events from any thread."""

    def __init__(self, engine, settings, client):
        self.engine = engine
        self.settings = settings
        self.client = client
        self.loads = []
        self.posts = []
        self.scripts = []
        self.cookie_requests = []
        self.destroy_count = 0

    # WebView interface

    def load_url(self, url, headers):
        self.loads.append((url, dict(headers)))
        self._after_load()

    def post_url(self, url, body):
        self.posts.append((url, body))
        self._after_load()

    def _after_load(self):
        if self.engine.on_load is not None:
            threading.Thread(target=self.engine.on_load, args=(self,), daemon=True).start()

    def evaluate_script(self, script):
        self.scripts.append(script)
        future = Future()
        if self.engine.script_error is not None:
            future.set_exception(self.engine.script_error)
        elif script == OUTER_HTML_SCRIPT:
            # Browser bridges hand results back as JSON string literals
            future.set_result(json.dumps(self.engine.document))
        else:
            future.set_result("null")
        return future

    def get_cookie(self, url):
        self.cookie_requests.append(url)
        return self.engine.cookie

    def destroy(self):
        self.destroy_count += 1

    # Engine event simulation

    def fire_load_finished(self, url=None):
        if url is None:
            url = self.loads[0][0] if self.loads else self.posts[0][0]
        self.client.on_load_finished(url)

    def fire_load_error(self, description, url=None):
        self.client.on_load_error(description, url)

    def fire_resource(self, url):
        self.client.on_resource(url)

    def fire_certificate_warning(self, url):
        warning = FakeCertificateWarning(url)
        self.client.on_certificate_warning(warning)
        return warning


class FakeEngine(Engine):
    def __init__(self, document=DEFAULT_DOCUMENT, cookie="sid=abc; theme=dark"):
        self.document = document
        self.cookie = cookie
        self.script_error = None
        self.create_error = None
        self.on_load = None
        self.views = []
        self.shutdown_called = False
        self._views_changed = threading.Condition()

    def create_view(self, settings, client):
        if self.create_error is not None:
            raise self.create_error
        view = FakeView(self, settings, client)
        with self._views_changed:
            self.views.append(view)
            self._views_changed.notify_all()
        return view

    def shutdown(self):
        self.shutdown_called = True

    def wait_for_view(self, index=0, timeout=5):
        with self._views_changed:
            created = self._views_changed.wait_for(lambda: len(self.views) > index, timeout)
        assert created, f"view {index} was never created"
        return self.views[index]


# ---------------------------------------------------------------------------
# Callbacks
# ---------------------------------------------------------------------------


class RecordingCallback(Callback):
    def __init__(self):
        self.results = []
        self.errors = []
        self.threads = []
        self.done = threading.Event()

    def on_result(self, result):
        self.results.append(result)
        self.threads.append(threading.current_thread().name)
        self.done.set()

    def on_error(self, error):
        self.errors.append(error)
        self.threads.append(threading.current_thread().name)
        self.done.set()

    @property
    def count(self):
        return len(self.results) + len(self.errors)

    def wait(self, timeout=5):
        return self.done.wait(timeout)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine():
    return FakeEngine()


@pytest.fixture()
def callback():
    return RecordingCallback()


@pytest.fixture()
def config():
    """Configuration without settle delay or sniff timeout."""
    return SessionConfig(settle_delay=0, sniff_timeout=None)


@pytest.fixture()
def session(engine, callback, config):
    session = AjaxSession(callback, engine=engine, config=config)
    yield session
    session.close()
