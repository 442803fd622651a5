import os
import tempfile
import threading
from pathlib import Path

import pytest
import requests

# Keep Qt headless and keep logs, settings and models out of the real home dir
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
_sandbox = tempfile.mkdtemp(prefix="transcribeasy-tests-")
for _var in ("XDG_CONFIG_HOME", "XDG_DATA_HOME", "XDG_STATE_HOME"):
    os.environ[_var] = os.path.join(_sandbox, _var.lower())

from transcribeasy.core.models import ModelManager, StatusStore  # noqa: E402


class FakeResponse:
    """Stand-in for a streamed ``requests.Response``."""

    def __init__(
        self,
        chunks=(),
        status_code=200,
        content_length=None,
        gate=None,
        hold_after=0,
        error_after=None,
    ):
        self.status_code = status_code
        self.headers = {}
        if content_length is not None:
            self.headers["content-length"] = str(content_length)
        self._chunks = list(chunks)
        self._gate = gate
        self._hold_after = hold_after
        self._error_after = error_after
        self.closed = False

    def iter_content(self, chunk_size=1):
        for index, chunk in enumerate(self._chunks):
            if self._gate is not None and index >= self._hold_after:
                self._gate.wait(timeout=5)
            if self._error_after is not None and index >= self._error_after:
                raise requests.exceptions.ChunkedEncodingError("connection reset")
            yield chunk

    def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, response_factory):
        self._factory = response_factory
        self.calls = []
        self._lock = threading.Lock()

    def get(self, url, stream=False, timeout=None):
        with self._lock:
            self.calls.append({"url": url, "stream": stream, "timeout": timeout})
        result = self._factory()
        if isinstance(result, Exception):
            raise result
        return result


def payload(chunk_count=10, chunk_size=1024):
    chunks = [bytes([i % 256]) * chunk_size for i in range(chunk_count)]
    return chunks, chunk_count * chunk_size


@pytest.fixture
def models_dir(tmp_path) -> Path:
    return tmp_path / "models"


@pytest.fixture
def store(tmp_path) -> StatusStore:
    return StatusStore(tmp_path / "model_states.json")


@pytest.fixture
def ok_session():
    chunks, total = payload()
    return FakeSession(lambda: FakeResponse(chunks, content_length=total))


@pytest.fixture
def make_manager(qtbot, store, models_dir):
    managers = []

    def factory(session=None, manager_store=None):
        manager = ModelManager(
            store=manager_store or store, models_dir=models_dir, session=session
        )
        managers.append(manager)
        return manager

    yield factory

    for manager in managers:
        manager.shutdown()


@pytest.fixture
def recorder():
    """Collects (model_id, record, message) tuples from ``state_changed``."""

    class Recorder:
        def __init__(self):
            self.events = []

        def on_state_changed(self, model_id, record, message):
            self.events.append((model_id, record, message))

        def for_model(self, model_id):
            return [(r, m) for mid, r, m in self.events if mid == model_id]

    return Recorder()
