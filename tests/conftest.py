import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from layoutgen import create_app, socketio  # noqa: E402
from layoutgen.routes.layout_api import clear_runs  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    app.config.update({"TESTING": True})
    return app


@pytest.fixture(autouse=True)
def _push_app_context(test_app):
    ctx = test_app.app_context()
    ctx.push()
    try:
        yield
    finally:
        ctx.pop()


@pytest.fixture(autouse=True)
def _isolated_layout_env(monkeypatch):
    """Keep developer LAYOUT_* variables from leaking into generation configs."""
    for key in list(os.environ):
        if key.startswith("LAYOUT_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
def _clear_layout_runs():
    clear_runs()
    yield
    clear_runs()


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture()
def socket_client(test_app):
    # Flask-SocketIO provides a test client we can use against the global socketio instance
    test_client = socketio.test_client(test_app, flask_test_client=test_app.test_client())
    yield test_client
    test_client.disconnect()


@pytest.fixture()
def fake_run(test_app):
    """Register a run backed by fake physics so ticks are instant and deterministic."""
    from layoutgen.generation import GenerationConfig
    from layoutgen.routes.layout_api import create_run
    from tests.layout_test_utils import FakePhysicsWorld

    def _make(**overrides):
        options = dict(seed=7, room_threshold=5, min_area=0.0)
        options.update(overrides)
        return create_run(GenerationConfig(**options), physics=FakePhysicsWorld(sleep_after=2))

    return _make
