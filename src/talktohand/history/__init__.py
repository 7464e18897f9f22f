"""Message history storage for talktohand.

Persists the conversation transcript between runs.
"""

from .base import MessageStore
from .factory import create_message_store
from .in_memory import InMemoryMessageStore

__all__ = [
    "InMemoryMessageStore",
    "MessageStore",
    "create_message_store",
]
