"""Abstract base class for message history stores.

This module defines the interface for persisting a conversation's messages.
The abstraction hides:
- Storage format (rows, in-memory list)
- Persistence mechanism (file, database, in-memory)
- Connection management
"""

from abc import ABC, abstractmethod

from ..chat.models import Message


class MessageStore(ABC):
    """Abstract message history store.

    Holds one conversation's messages, oldest to newest. Writes replace the
    whole history at once.

    Supports async context manager protocol:
        async with store:
            messages = await store.load()
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def load(self) -> list[Message]:
        """Return all stored messages, oldest to newest."""

    @abstractmethod
    async def replace_all(self, messages: list[Message]) -> None:
        """Overwrite the stored history with *messages*, in order."""

    @abstractmethod
    async def clear(self) -> None:
        """Delete all stored messages."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def __aenter__(self) -> "MessageStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
