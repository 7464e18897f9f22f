"""In-memory message store.

Data is lost when the application exits. Suitable for testing and
throwaway sessions.
"""

from ..chat.models import Message
from .base import MessageStore


class InMemoryMessageStore(MessageStore):
    """Message history held in a list."""

    def __init__(self, messages: list[Message] | None = None):
        self._messages: list[Message] = list(messages or [])

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    async def load(self) -> list[Message]:
        return list(self._messages)

    async def replace_all(self, messages: list[Message]) -> None:
        self._messages = list(messages)

    async def clear(self) -> None:
        self._messages = []

    @property
    def backend_type(self) -> str:
        return "memory"
