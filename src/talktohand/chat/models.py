"""Data models for chat exchanges.

Conversation values (messages, state, per-request configuration), the
events a stream session publishes, and the OpenAI-compatible wire shapes.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..config import COMPLETIONS_PATH, EVENT_STREAM_MEDIA_TYPE
from .errors import ChatError, ErrorKind, InvalidEndpointError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_url(base_url: str, path: str) -> httpx.URL:
    """Join a server base URL and an API path.

    Args:
        base_url: Server base URL, e.g. ``http://localhost:1337``
        path: Absolute API path to append

    Returns:
        The joined URL

    Raises:
        InvalidEndpointError: If the result is not an absolute http(s) URL
    """
    try:
        url = httpx.URL(base_url.strip().rstrip("/") + path)
    except httpx.InvalidURL as e:
        raise InvalidEndpointError() from e

    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidEndpointError()
    return url


class Message(BaseModel):
    """A single chat message.

    Messages are immutable. A streaming reply is updated by replacing the
    message with a copy that keeps the same ``id`` and ``created_at``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    text: str = Field(description="Message body")
    is_from_user: bool = Field(description="True for user messages, False for assistant")
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_user(cls, text: str) -> "Message":
        return cls(text=text, is_from_user=True)

    @classmethod
    def from_assistant(cls, text: str = "") -> "Message":
        return cls(text=text, is_from_user=False)

    @property
    def role(self) -> str:
        """Wire role of the message sender."""
        return "user" if self.is_from_user else "assistant"

    def with_text(self, text: str) -> "Message":
        """Return a copy with new text and the same identity."""
        return self.model_copy(update={"text": text})


class ConversationState(BaseModel):
    """Published state of one conversation.

    Message order is chronological. The flags are transient and only
    meaningful while an exchange is in flight.
    """

    messages: list[Message] = Field(default_factory=list)
    is_sending: bool = False
    is_awaiting_first_token: bool = False
    is_streaming: bool = False
    active_streaming_message_id: str | None = None

    def snapshot(self) -> "ConversationState":
        """Copy of the state that later mutations do not affect."""
        return self.model_copy(update={"messages": list(self.messages)})

    def index_of(self, message_id: str) -> int | None:
        for i, message in enumerate(self.messages):
            if message.id == message_id:
                return i
        return None


class RequestSpec(BaseModel):
    """Configuration for a single chat-completion request."""

    model_config = ConfigDict(frozen=True)

    server_base_url: str
    api_key: str = Field(default="", repr=False)
    model_identifier: str
    user_text: str
    streaming_enabled: bool = True

    def endpoint_url(self) -> httpx.URL:
        """Completions endpoint for this request.

        Raises:
            InvalidEndpointError: If the server base URL is malformed
        """
        return resolve_url(self.server_base_url, COMPLETIONS_PATH)

    def headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.streaming_enabled:
            headers["Accept"] = EVENT_STREAM_MEDIA_TYPE
        return headers

    def payload(self) -> dict[str, Any]:
        return CompletionRequest(
            model=self.model_identifier,
            messages=[WireMessage(role="user", content=self.user_text)],
            stream=self.streaming_enabled,
        ).model_dump()


class StreamDelta(BaseModel):
    """One decoded unit of an event stream."""

    model_config = ConfigDict(frozen=True)

    content_fragment: str | None = None
    is_terminal: bool = False


# Session events


@dataclass(frozen=True)
class FirstToken:
    """The first content fragment arrived: typing ends, streaming begins."""


@dataclass(frozen=True)
class Delta:
    """Sanitized text accumulated so far."""

    text: str


@dataclass(frozen=True)
class Settled:
    """The exchange finished successfully.

    Attributes:
        text: Final sanitized text
        streamed: True if the text was already published through deltas
    """

    text: str
    streamed: bool = False


@dataclass(frozen=True)
class Failed:
    """The exchange failed and will not be retried."""

    error: ChatError

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


SessionEvent = FirstToken | Delta | Settled | Failed


# Wire models (OpenAI-compatible)


class WireMessage(BaseModel):
    role: str
    content: str | None = None


class CompletionRequest(BaseModel):
    model: str
    messages: list[WireMessage]
    stream: bool = False


class CompletionChoice(BaseModel):
    message: WireMessage
    index: int | None = None
    finish_reason: str | None = None


class CompletionResponse(BaseModel):
    """Body of a non-streaming chat-completion response."""

    choices: list[CompletionChoice]
    id: str | None = None
    model: str | None = None


class ChoiceDelta(BaseModel):
    content: str | None = None
    role: str | None = None


class StreamChoice(BaseModel):
    delta: ChoiceDelta | None = None
    index: int | None = None
    finish_reason: str | None = None


class StreamChunk(BaseModel):
    """JSON payload of one ``data:`` line in a streaming response."""

    choices: list[StreamChoice] = Field(default_factory=list)
    id: str | None = None
    object: str | None = None
    created: int | None = None
    model: str | None = None
