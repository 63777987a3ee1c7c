"""Shared fixtures for web tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from run_scout.history.store import MemoryKeyValueStore
from run_scout.routes.models import Place, RouteSuggestions
from run_scout.tracking.timer import ManualTicker
from run_scout.web.app import create_app


@pytest.fixture
def ticker():
    return ManualTicker()


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def provider():
    """Fake route provider returning two places."""
    p = MagicMock()
    p.fetch.return_value = RouteSuggestions(
        text="two spots",
        places=[
            Place("Parque Ibirapuera", -23.5874, -46.6576, "5km - Asphalt", "Beginner"),
            Place("Parque Villa-Lobos", -23.5470, -46.7222, "4km - Mixed", "Beginner"),
        ],
    )
    return p


@pytest.fixture
def app(store, ticker, provider):
    return create_app(store=store, ticker=ticker, provider=provider)


@pytest.fixture
def client(app):
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c
