"""Shared test fixtures."""

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from src.alexa_bridge.config import Settings, get_settings
from src.alexa_bridge.main import app

WEBHOOK_URL = "https://hook.example.com/alexa"


@pytest.fixture
def test_settings() -> Settings:
    """Settings with verification off and a fake downstream URL."""
    return Settings(
        webhook_url=WEBHOOK_URL,
        verify_signatures=False,
        environment="test",
        default_language="en",
    )


@pytest.fixture
def client(test_settings: Settings) -> Iterator[TestClient]:
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()
