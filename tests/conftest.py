import os

import pytest
from fastapi.testclient import TestClient

# Keep tests independent of any local .env
os.environ.setdefault("DEBUG", "false")

from pdf_renderer.config import settings
from pdf_renderer.services.browser_manager import BrowserManager, browser_manager

from .fakes import FakeEngine


def _reset(manager: BrowserManager) -> None:
    manager._engine = None
    manager._launching = None
    manager._active_contexts = 0
    manager._launch_count = 0


@pytest.fixture(autouse=True)
def _clean_browser_manager():
    # The app-wide singleton outlives each test's event loop
    _reset(browser_manager)
    yield
    _reset(browser_manager)


@pytest.fixture
def fake_engine(monkeypatch):
    """Route the app-wide browser manager to an in-memory engine."""
    engine = FakeEngine()
    monkeypatch.setattr(browser_manager, "engine_factory", lambda: engine)
    return engine


@pytest.fixture
def manager():
    """A standalone manager with its own fake engine, for unit tests."""
    engine = FakeEngine()
    return BrowserManager(engine_factory=lambda: engine, shutdown_grace_seconds=1.0)


@pytest.fixture
def client(fake_engine):
    """TestClient with lifespan, so the browser is launched eagerly."""
    from pdf_renderer.main import app
    with TestClient(app) as c:
        yield c


@pytest.fixture
def lazy_client(fake_engine, monkeypatch):
    """TestClient whose browser is only launched by the first render."""
    monkeypatch.setattr(settings, "eager_launch", False)
    from pdf_renderer.main import app
    with TestClient(app) as c:
        yield c
