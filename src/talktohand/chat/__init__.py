from .catalog import list_models
from .controller import ConversationController
from .errors import (
    ChatError,
    ConversationBusyError,
    DecodingError,
    ErrorKind,
    InvalidEndpointError,
    RequestTimeoutError,
    ServerError,
    TransportError,
)
from .models import (
    ConversationState,
    Delta,
    Failed,
    FirstToken,
    Message,
    RequestSpec,
    SessionEvent,
    Settled,
    StreamDelta,
)
from .parser import parse_line
from .sanitizer import clean
from .session import StreamSession

__all__ = [
    "ChatError",
    "ConversationBusyError",
    "ConversationController",
    "ConversationState",
    "DecodingError",
    "Delta",
    "ErrorKind",
    "Failed",
    "FirstToken",
    "InvalidEndpointError",
    "Message",
    "RequestSpec",
    "RequestTimeoutError",
    "ServerError",
    "SessionEvent",
    "Settled",
    "StreamDelta",
    "StreamSession",
    "TransportError",
    "clean",
    "list_models",
    "parse_line",
]
