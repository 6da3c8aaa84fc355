"""Shared fixtures for the journal tests."""

from __future__ import annotations

from datetime import datetime

import pytest
from helpers import NOW
from PySide6.QtCore import QCoreApplication

from stoicmood.storage import MemoryKeyValueStorage
from stoicmood.store import MoodStore


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def storage() -> MemoryKeyValueStorage:
    return MemoryKeyValueStorage()


@pytest.fixture
def store(storage: MemoryKeyValueStorage) -> MoodStore:
    return MoodStore(storage, clock=lambda: NOW)
