"""
pytest configuration and fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from chatdemo.main import create_app
from chatdemo.realtime import RealtimeHub


@pytest.fixture
def static_dir(tmp_path):
    """Assets root with a single text file."""
    (tmp_path / "hello.txt").write_text("hello from disk")
    (tmp_path / "page.html").write_text("<p>chat</p>")
    return tmp_path


@pytest.fixture
def hub() -> RealtimeHub:
    return RealtimeHub(write_timeout=1.0)


@pytest.fixture
def app(hub, static_dir):
    return create_app(hub=hub, static_dir=str(static_dir), ping_interval=60)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
