"""Conversation orchestration and published state.

The controller is the seam other layers talk to. A UI subscribes to state
snapshots; storage and settings are injected collaborators.

Usage:
    controller = ConversationController(settings_store, message_store)
    unsubscribe = controller.subscribe(render)
    await controller.load_history()
    await controller.send("Hello")
"""

import logging
from collections.abc import Callable
from contextlib import aclosing
from typing import TYPE_CHECKING

from ..config import ERROR_MESSAGE_PREFIX
from .errors import ConversationBusyError
from .models import (
    ConversationState,
    Delta,
    Failed,
    FirstToken,
    Message,
    RequestSpec,
    SessionEvent,
    Settled,
)
from .session import StreamSession

if TYPE_CHECKING:
    from ..history import MessageStore
    from ..settings import SettingsStore

logger = logging.getLogger(__name__)

StateCallback = Callable[[ConversationState], None]


class ConversationController:
    """Drives one conversation through its exchanges.

    At most one exchange is in flight at a time. Every state transition is
    published to subscribers, in order, as an independent snapshot.
    """

    def __init__(
        self,
        settings: "SettingsStore",
        store: "MessageStore",
        session_factory: Callable[[], StreamSession] = StreamSession,
    ):
        """Initialize the controller.

        Args:
            settings: Source of server URL, API key and model name
            store: Persistent message history
            session_factory: Creates a fresh session for each send
        """
        self._settings = settings
        self._store = store
        self._session_factory = session_factory
        self._state = ConversationState()
        self._session: StreamSession | None = None
        self._subscribers: list[StateCallback] = []

    @property
    def state(self) -> ConversationState:
        """Snapshot of the current conversation state."""
        return self._state.snapshot()

    @property
    def is_busy(self) -> bool:
        return self._session is not None

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        """Register a callback for state transitions.

        Returns:
            A function that removes the callback again
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self) -> None:
        snapshot = self._state.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("State subscriber %r failed", callback)

    async def load_history(self) -> None:
        """Replace in-memory messages with the stored history."""
        self._state.messages = await self._store.load()
        logger.debug("Loaded %d message(s) from %s store",
                     len(self._state.messages), self._store.backend_type)
        self._publish()

    async def send(self, user_text: str) -> None:
        """Send a user message and follow the reply to completion.

        Whitespace-only text is ignored. Failures end up as assistant
        messages rather than exceptions.

        Raises:
            ConversationBusyError: If another exchange is in flight
        """
        if not user_text.strip():
            return
        if self._session is not None:
            raise ConversationBusyError("A reply is still in progress")

        settings = self._settings.get()
        spec = RequestSpec(
            server_base_url=settings.server_url,
            api_key=settings.api_key,
            model_identifier=settings.model_name,
            user_text=user_text,
            streaming_enabled=settings.streaming,
        )
        session = self._session_factory()
        self._session = session

        self._state.messages.append(Message.from_user(user_text))
        self._state.is_sending = True
        self._state.is_awaiting_first_token = True
        self._publish()

        try:
            async with aclosing(session.start(spec)) as events:
                async for event in events:
                    self._apply(event)
        finally:
            self._session = None
            self._state.is_sending = False
            self._state.is_awaiting_first_token = False
            self._state.is_streaming = False
            self._state.active_streaming_message_id = None
            self._publish()
            await self._store.replace_all(list(self._state.messages))

    def _apply(self, event: SessionEvent) -> None:
        if isinstance(event, FirstToken):
            message = Message.from_assistant()
            self._state.messages.append(message)
            self._state.is_awaiting_first_token = False
            self._state.is_streaming = True
            self._state.active_streaming_message_id = message.id

        elif isinstance(event, Delta):
            self._replace_active_text(event.text)

        elif isinstance(event, Settled):
            if event.streamed:
                self._replace_active_text(event.text)
            else:
                self._state.messages.append(Message.from_assistant(event.text))

        elif isinstance(event, Failed):
            self._state.messages.append(
                Message.from_assistant(f"{ERROR_MESSAGE_PREFIX}{event.error.description}")
            )

        self._publish()

    def _replace_active_text(self, text: str) -> None:
        message_id = self._state.active_streaming_message_id
        if message_id is None:
            return
        index = self._state.index_of(message_id)
        if index is not None:
            self._state.messages[index] = self._state.messages[index].with_text(text)

    def cancel(self) -> None:
        """Cancel the in-flight exchange, if any."""
        if self._session is not None:
            self._session.cancel()

    def clear(self) -> None:
        """Empty the conversation and reset transient flags.

        Stored history is left untouched.
        """
        self._state = ConversationState()
        self._publish()

    async def clear_history(self) -> None:
        """Empty the conversation and the stored history."""
        self.clear()
        await self._store.clear()
