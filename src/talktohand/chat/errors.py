"""Error taxonomy for chat exchanges.

Every terminal failure of an exchange is one of these kinds. None of them
are retried; the conversation controller turns each into an assistant
message so the transcript records failures alongside replies.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of terminal exchange failures."""

    INVALID_ENDPOINT = "invalid_endpoint"
    SERVER_ERROR = "server_error"
    DECODING_ERROR = "decoding_error"
    TIMEOUT = "timeout"
    TRANSPORT = "transport"


class ChatError(Exception):
    """Base class for exchange failures.

    Attributes:
        kind: Category of the failure
        description: Human-readable text shown to the user
    """

    kind: ErrorKind = ErrorKind.TRANSPORT
    default_description = "Request failed"

    def __init__(self, description: str | None = None):
        self.description = description or self.default_description
        super().__init__(self.description)


class InvalidEndpointError(ChatError):
    """The configured server URL is not a well-formed absolute URL."""

    kind = ErrorKind.INVALID_ENDPOINT
    default_description = "Invalid server URL"


class ServerError(ChatError):
    """The server answered with a status other than 200."""

    kind = ErrorKind.SERVER_ERROR
    default_description = "Server error occurred"

    def __init__(self, status_code: int | None = None, description: str | None = None):
        self.status_code = status_code
        if description is None and status_code is not None:
            description = f"{self.default_description} (HTTP {status_code})"
        super().__init__(description)


class DecodingError(ChatError):
    """The response body does not have the expected shape."""

    kind = ErrorKind.DECODING_ERROR
    default_description = "Failed to decode response"


class RequestTimeoutError(ChatError):
    """The exchange exceeded its overall time limit."""

    kind = ErrorKind.TIMEOUT
    default_description = "The request timed out."


class TransportError(ChatError):
    """The connection failed or was reset."""

    kind = ErrorKind.TRANSPORT
    default_description = "Could not reach the server"


class ConversationBusyError(RuntimeError):
    """Raised when sending while another exchange is still in flight."""
