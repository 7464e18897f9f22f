"""Settings store implementations."""

import json
import os
from pathlib import Path

from pydantic import ValidationError

from ..config import DEFAULT_SETTINGS_PATH
from .base import SettingsStore
from .models import Settings


class InMemorySettingsStore(SettingsStore):
    """Settings kept for the lifetime of the process."""

    def _persist(self, settings: Settings) -> None:
        pass

    @property
    def backend_type(self) -> str:
        return "memory"


class JsonFileSettingsStore(SettingsStore):
    """Settings persisted to a JSON file.

    The file holds the API key, so it is written readable by the owner only.
    """

    def __init__(self, path: str | Path = DEFAULT_SETTINGS_PATH):
        self._path = Path(path)
        super().__init__(self._read())

    def _read(self) -> Settings:
        if not self._path.exists():
            return Settings()
        try:
            return Settings.model_validate_json(self._path.read_text(encoding="utf-8"))
        except ValidationError as e:
            raise ValueError(f"Invalid settings file {self._path}: {e}") from e

    def _persist(self, settings: Settings) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(settings.model_dump(), f, indent=2)
        os.replace(tmp_path, self._path)

    @property
    def backend_type(self) -> str:
        return "json"

    @property
    def path(self) -> Path:
        return self._path
