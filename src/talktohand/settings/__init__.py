from .base import SettingsStore
from .factory import create_settings_store, settings_from_env
from .models import Settings
from .stores import InMemorySettingsStore, JsonFileSettingsStore

__all__ = [
    "InMemorySettingsStore",
    "JsonFileSettingsStore",
    "Settings",
    "SettingsStore",
    "create_settings_store",
    "settings_from_env",
]
