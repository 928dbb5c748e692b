from __future__ import annotations

import pytest

from graphobject.config.settings import GraphObjectConfig


@pytest.fixture()
def place_document() -> dict:
    return {
        "id": "123",
        "name": "Cafe",
        "location": {"city": "Paris", "latitude": 48, "longitude": 2.35},
        "checkins": 42,
    }


@pytest.fixture()
def checkin_document() -> dict:
    return {
        "id": "900",
        "message": "coffee",
        "from": {"id": "7", "name": "Ana"},
        "place": {"id": "123", "name": "Cafe", "location": {"city": "Paris"}},
        "tags": [
            {"id": "8", "name": "Ben"},
            {"id": "9", "name": "Cleo"},
        ],
    }


@pytest.fixture()
def strict_config() -> GraphObjectConfig:
    return GraphObjectConfig(max_depth=3)
