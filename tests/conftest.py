"""Shared fixtures: a file-backed SQLite store and an HTTP client around it."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[1] / "python"
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))

from fastapi.testclient import TestClient

from counter_store.database import create_store_engine
from counter_store.server import create_app
from counter_store.store import CounterStore


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'counters.db'}"


@pytest.fixture
def engine(database_url):
    engine = create_store_engine(database_url)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    store = CounterStore(engine)
    store.initialize()
    return store


@pytest.fixture
def client(store):
    return TestClient(create_app(store))
