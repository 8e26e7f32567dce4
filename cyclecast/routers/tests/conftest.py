"""Shared fixtures for API tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from cyclecast.config import Settings
from cyclecast.main import create_app


def period_payload(start: date, days: int = 5, flow: str = "medium") -> list[dict]:
    return [
        {"date": (start + timedelta(days=i)).isoformat(), "flow": flow}
        for i in range(days)
    ]


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test", rate_limit_per_minute=1000)


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))
