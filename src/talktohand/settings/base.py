"""Abstract base class for settings stores.

The abstraction hides where settings live (memory, a JSON file). Reads
return an immutable snapshot, so any number of conversations may read
concurrently; writes are serialized by a lock.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any

from .models import Settings


class SettingsStore(ABC):
    """Holds the current settings snapshot."""

    def __init__(self, initial: Settings | None = None):
        self._settings = initial or Settings()
        self._write_lock = threading.Lock()

    def get(self) -> Settings:
        """Return the current settings."""
        return self._settings

    def set(self, **changes: Any) -> Settings:
        """Apply changes and return the new settings.

        Args:
            **changes: Field values to replace (server_url, api_key,
                model_name, streaming)

        Raises:
            ValueError: If a key is not a settings field
        """
        unknown = set(changes) - set(Settings.model_fields)
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        with self._write_lock:
            updated = Settings.model_validate({**self._settings.model_dump(), **changes})
            self._persist(updated)
            self._settings = updated
        return updated

    @abstractmethod
    def _persist(self, settings: Settings) -> None:
        """Store *settings*; called with the write lock held."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
