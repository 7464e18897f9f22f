"""Collaborator factory functions for CLI.

Centralizes creation of the settings and history stores from environment
variables. Hides configuration details from command implementations.
"""

import os

from ..config import DEFAULT_HISTORY_PATH, DEFAULT_SETTINGS_PATH
from ..history import MessageStore, create_message_store
from ..settings import SettingsStore, create_settings_store, settings_from_env


def get_settings_store() -> SettingsStore:
    """Create the persistent settings store.

    Environment variables:
        TALKTOHAND_SETTINGS_PATH: JSON settings file (default: ~/.talktohand/settings.json)
    """
    return create_settings_store(
        "json",
        path=os.getenv("TALKTOHAND_SETTINGS_PATH", str(DEFAULT_SETTINGS_PATH)),
    )


def get_session_settings(streaming: bool | None = None) -> SettingsStore:
    """Create the settings a chat run reads from.

    Stored settings with environment overrides on top, held in memory so
    that per-run overrides never leak back into the settings file.

    Args:
        streaming: Force streaming on or off for this run
    """
    settings = settings_from_env(get_settings_store().get())
    if streaming is not None:
        settings = settings.model_copy(update={"streaming": streaming})
    return create_settings_store("memory", initial=settings)


def get_message_store() -> MessageStore:
    """Create the message history store.

    Environment variables:
        TALKTOHAND_HISTORY_BACKEND: memory or sqlite (default: sqlite)
        TALKTOHAND_HISTORY_PATH: SQLite file (default: ~/.talktohand/history.db)
    """
    backend = os.getenv("TALKTOHAND_HISTORY_BACKEND", "sqlite").lower()
    if backend == "sqlite":
        return create_message_store(
            "sqlite",
            path=os.getenv("TALKTOHAND_HISTORY_PATH", str(DEFAULT_HISTORY_PATH)),
        )
    return create_message_store(backend)
