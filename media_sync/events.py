"""Subscribable notification channels for session changes."""

import inspect
from collections.abc import Awaitable, Callable

from media_sync.logging_config import get_logger, log_with_context
from media_sync.models.session import Session

logger = get_logger(__name__)

SessionCallback = Callable[[Session], Awaitable[None] | None]


class EventChannel:
    """A named list of subscribers that all receive the same session snapshot.

    Callbacks may be plain functions or coroutine functions. A subscriber that
    raises is logged and skipped; it never stops delivery to the others.
    """

    def __init__(self, name: str):
        self.name = name
        self._subscribers: list[SessionCallback] = []

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: SessionCallback) -> Callable[[], None]:
        """Register a callback.

        Returns:
            A function that removes the subscription again
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def emit(self, session: Session) -> None:
        for callback in list(self._subscribers):
            try:
                result = callback(session)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                log_with_context(
                    logger,
                    "error",
                    "Event subscriber failed",
                    channel=self.name,
                    session_id=session.id,
                    error=str(e),
                    error_type=type(e).__name__,
                    event_type="subscriber_error",
                )


class SessionEvents:
    """The four channels a session store publishes on."""

    def __init__(self):
        self.session_focused = EventChannel("session_focused")
        self.playback_state_changed = EventChannel("playback_state_changed")
        self.media_changed = EventChannel("media_changed")
        self.timeline_changed = EventChannel("timeline_changed")

    def channels(self) -> list[EventChannel]:
        return [self.session_focused, self.playback_state_changed, self.media_changed, self.timeline_changed]
