"""Protocol constants and defaults.

Centralizes magic numbers and literal values shared across the package.
"""

from pathlib import Path


class LogLevel:
    """Log level constants with numeric values for comparison.

    Mirrors the standard logging hierarchy: DEBUG < INFO < WARNING < ERROR.
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns WARNING if invalid."""
        return cls._from_string.get(level_str.lower(), cls.WARNING)


# Wire protocol
API_PREFIX = "/v1"
COMPLETIONS_PATH = f"{API_PREFIX}/chat/completions"
DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
EVENT_STREAM_MEDIA_TYPE = "text/event-stream"

# Session timing
REQUEST_TIMEOUT_SECONDS = 120.0  # Upper bound on a whole exchange
PACING_DELAY_SECONDS = 0.01  # Between emitted deltas

# Defaults
DEFAULT_MODEL_NAME = "Menlo:Jan-nano-128k-gguf:jan-nano-128k-Q8_0.gguf"
NO_RESPONSE_TEXT = "No response"
ERROR_MESSAGE_PREFIX = "Error: "

# File locations
DEFAULT_DATA_DIR = Path.home() / ".talktohand"
DEFAULT_HISTORY_PATH = DEFAULT_DATA_DIR / "history.db"
DEFAULT_SETTINGS_PATH = DEFAULT_DATA_DIR / "settings.json"
