"""
Talktohand: a chat client for self-hosted, OpenAI-compatible LLM servers.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .chat import (
    ChatError,
    ConversationController,
    ConversationState,
    Message,
    RequestSpec,
    StreamSession,
    list_models,
)
from .history import MessageStore, create_message_store
from .settings import Settings, SettingsStore, create_settings_store

__all__ = [
    "ChatError",
    "ConversationController",
    "ConversationState",
    "Message",
    "MessageStore",
    "RequestSpec",
    "Settings",
    "SettingsStore",
    "StreamSession",
    "create_message_store",
    "create_settings_store",
    "list_models",
]
