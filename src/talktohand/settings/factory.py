"""Factory and environment overlay for settings."""

import os
from typing import Any

from .base import SettingsStore
from .models import Settings

_TRUE_VALUES = {"1", "true", "yes", "on"}

_ENV_FIELDS = {
    "TALKTOHAND_SERVER_URL": "server_url",
    "TALKTOHAND_API_KEY": "api_key",
    "TALKTOHAND_MODEL": "model_name",
}


def create_settings_store(
    backend: str = "json",
    **kwargs: Any
) -> SettingsStore:
    """Create a settings store.

    Args:
        backend: Backend type ("memory" or "json")
        **kwargs: Backend-specific configuration
            For memory:
                - initial: Settings | None
            For json:
                - path: str | Path (default: ~/.talktohand/settings.json)

    Returns:
        SettingsStore instance

    Raises:
        ValueError: If backend type is not supported
    """
    from .stores import InMemorySettingsStore, JsonFileSettingsStore

    if backend == "memory":
        return InMemorySettingsStore(**kwargs)

    if backend == "json":
        return JsonFileSettingsStore(**kwargs)

    raise ValueError(
        f"Unsupported settings backend: {backend}. "
        f"Supported backends: memory, json"
    )


def settings_from_env(base: Settings | None = None) -> Settings:
    """Overlay environment variables on top of *base*.

    Environment variables:
        TALKTOHAND_SERVER_URL: Server base URL
        TALKTOHAND_API_KEY: Bearer token
        TALKTOHAND_MODEL: Model identifier
        TALKTOHAND_STREAM: "true"/"false" to toggle streaming
    """
    base = base or Settings()
    overrides: dict[str, Any] = {}

    for env_var, field in _ENV_FIELDS.items():
        value = os.getenv(env_var)
        if value is not None:
            overrides[field] = value

    stream = os.getenv("TALKTOHAND_STREAM")
    if stream is not None:
        overrides["streaming"] = stream.strip().lower() in _TRUE_VALUES

    if not overrides:
        return base
    return base.model_copy(update=overrides)
