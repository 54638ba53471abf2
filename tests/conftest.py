import pytest
from fastapi.testclient import TestClient

from taskdesk.main import create_app
from tests.support import make_settings


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """TestClient for the app; cookies persist across requests like a browser."""
    return TestClient(app)


@pytest.fixture
def store(app):
    return app.state.task_store
