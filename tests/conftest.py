"""Shared fixtures: every test device gets its own SQLite local store."""

import asyncio
import os
import tempfile

# Setup environment for testing (before cleanquest.config is imported)
os.environ["CLEANQUEST_DATA_DIR"] = tempfile.mkdtemp()
os.environ["CLEANQUEST_DB_PATH"] = os.path.join(os.environ["CLEANQUEST_DATA_DIR"], "test.db")
os.environ["CLEANQUEST_APP_ORIGIN"] = "https://cleanquest.test"

import pytest
from fastapi.testclient import TestClient

from cleanquest.config import Settings
from cleanquest.database import init_db, make_engine
from cleanquest.device import Device
from cleanquest.main import create_app
from cleanquest.stores.remote_registry import InMemoryRegistry


def run(coro):
    """Drive one service coroutine to completion."""
    return asyncio.run(coro)


@pytest.fixture
def registry():
    """Remote registry shared by every device of a test."""
    return InMemoryRegistry()


@pytest.fixture
def make_device(tmp_path, registry):
    """Factory: a fresh device (own local store) attached to the shared registry."""

    def _make(name="device", remote=None, **overrides):
        engine = make_engine(tmp_path / f"{name}.db")
        init_db(engine)
        return Device.build(engine, remote or registry, Settings(**overrides))

    return _make


@pytest.fixture
def device(make_device):
    return make_device("a")


@pytest.fixture
def client(device):
    with TestClient(create_app(device)) as c:
        yield c
