"""Pytest configuration and shared fixtures."""
import os

import pytest

from talktohand.history import InMemoryMessageStore
from talktohand.settings import InMemorySettingsStore, Settings

from .helpers import SERVER_URL


@pytest.fixture(scope="session")
def live_server():
    """Return a real server config from environment, for integration tests."""
    return {
        "server_url": os.getenv("TALKTOHAND_SERVER_URL"),
        "api_key": os.getenv("TALKTOHAND_API_KEY", ""),
    }


@pytest.fixture
def settings_store():
    """Settings pointing at the fake server."""
    return InMemorySettingsStore(Settings(
        server_url=SERVER_URL,
        api_key="test-key",
        model_name="test-model",
        streaming=True,
    ))


@pytest.fixture
def message_store():
    """Empty in-memory history."""
    return InMemoryMessageStore()
