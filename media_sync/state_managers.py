"""State managers for handling application-wide mutable state.

This module provides the session store: the single owner of playback session
state. It drives the poll cycle against the media-control endpoint, applies
change detection, and publishes notifications. Writes are serialized with
asyncio.Lock. All state managers inherit from StateManager ABC.
"""

import asyncio
import math
from abc import ABC, abstractmethod
from collections.abc import Coroutine
from typing import Any

from PIL import Image

from media_sync.asset_cache import AssetCache
from media_sync.config import Settings, get_settings
from media_sync.events import SessionEvents
from media_sync.exceptions import SessionNotFoundException, StoreStateException
from media_sync.logging_config import get_logger, log_with_context
from media_sync.models.media import KEY_COMMANDS, MediaKeyCode, TransportCommand
from media_sync.models.session import Session
from media_sync.services.transport_client import TransportClient

logger = get_logger(__name__)

# Deadbands in seconds; a reading must differ by strictly more to count.
# Deltas are raw float differences, so a nominal 0.1 step can land on either
# side (1.1 - 1.0 fires, 0.1 - 0.0 does not).
DURATION_THRESHOLD = 0.1
POSITION_THRESHOLD = 0.5


def _clean_text(value: str | None) -> str | None:
    """Strip a fetched field; blank or failed reads carry no information."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_seconds(value: str | None, field: str) -> float | None:
    text = _clean_text(value)
    if text is None:
        return None
    try:
        seconds = float(text)
    except ValueError:
        log_with_context(
            logger,
            "debug",
            "Ignoring unparseable timeline field",
            field=field,
            value=text,
            event_type="timeline_parse_failed",
        )
        return None
    if not math.isfinite(seconds):
        return None
    return seconds


class StateManager(ABC):
    """Base class for all state managers.

    State managers provide thread-safe access to mutable application state.
    All subclasses must implement lifecycle methods.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the state manager (called during app startup)."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup resources (called during app shutdown)."""
        pass


class SessionStore(StateManager):
    """Owns playback sessions and keeps them in sync with the media endpoint.

    Lifecycle: ``initialize()`` once, then ``start()`` to begin polling and
    ``stop()``/``cleanup()`` on shutdown. Consumers subscribe to the channels
    on ``events``; every notification carries a snapshot of the session, so a
    consumer's view does not change under it as later polls land.

    Commands (``play_pause``, ``next``, ``previous``, ``push_key``) return
    immediately. Their effect is observed on a later poll, e.g. as a
    playback-state change.
    """

    def __init__(
        self,
        transport: TransportClient,
        asset_cache: AssetCache,
        settings: Settings | None = None,
    ):
        """Initialize the session store.

        Args:
            transport: Client for the media-control endpoint
            asset_cache: Cache resolving cover URLs to decoded images
            settings: Settings instance (defaults to singleton)
        """
        if settings is None:
            settings = get_settings()

        self.transport = transport
        self.asset_cache = asset_cache
        self.events = SessionEvents()

        self._default_session_id = settings.default_session_id
        self._poll_interval = settings.poll_interval_seconds
        self._sessions: dict[str, Session] = {}
        self._focused_session_id: str | None = None
        self._initialized = False
        self._lock = asyncio.Lock()
        self._stopping = asyncio.Event()
        self._poll_task: asyncio.Task[None] | None = None
        self._background_tasks: set[asyncio.Task[Any]] = set()
        # Bumped on every metadata change; a cover result only applies to its own generation
        self._metadata_generation: dict[str, int] = {}

    # Lifecycle

    async def initialize(self) -> None:
        """Create the default session, focus it, and announce the focus.

        Raises:
            StoreStateException: If the store was already initialized
        """
        if self._initialized:
            raise StoreStateException(
                "Session store already initialized",
                details={"session_id": self._focused_session_id},
            )

        async with self._lock:
            session = Session(id=self._default_session_id)
            self._sessions[session.id] = session
            self._focused_session_id = session.id
            self._initialized = True

            log_with_context(
                logger,
                "info",
                "Default session created",
                session_id=session.id,
                event_type="session_created",
            )
            await self.events.session_focused.emit(session.snapshot())

    async def start(self) -> None:
        """Begin the poll cycle in the background.

        Raises:
            StoreStateException: If called before initialize()
        """
        if not self._initialized:
            raise StoreStateException("Session store must be initialized before polling starts")
        if self.is_running:
            return

        self._stopping.clear()
        self._poll_task = asyncio.create_task(self._monitor_playback(), name="media-sync-poll")
        log_with_context(
            logger,
            "info",
            "Playback polling started",
            poll_interval=self._poll_interval,
            base_url=self.transport.base_url,
            event_type="poll_started",
        )

    async def stop(self) -> None:
        """Signal shutdown and wait for the current iteration to finish."""
        self._stopping.set()
        task = self._poll_task
        if task is None:
            return
        await task
        self._poll_task = None
        log_with_context(
            logger,
            "info",
            "Playback polling stopped",
            event_type="poll_stopped",
        )

    async def cleanup(self) -> None:
        """Stop polling and let outstanding commands and cover fetches finish."""
        await self.stop()
        await self.drain_pending()

    async def drain_pending(self) -> None:
        """Wait until no command or cover-art task is outstanding."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    @property
    def is_running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    # Reads

    @property
    def focused_session_id(self) -> str | None:
        return self._focused_session_id

    @property
    def sessions(self) -> dict[str, Session]:
        """Snapshots of all tracked sessions keyed by id."""
        return {session_id: session.snapshot() for session_id, session in self._sessions.items()}

    def get_session(self, session_id: str) -> Session:
        """Get a snapshot of one session.

        Raises:
            SessionNotFoundException: If no session has this id
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundException(session_id)
        return session.snapshot()

    def get_focused_session(self) -> Session | None:
        if self._focused_session_id is None:
            return None
        return self._sessions[self._focused_session_id].snapshot()

    def get_thumbnail(self, session_id: str) -> Image.Image | None:
        """Get the cover image currently shown for a session, if any.

        Raises:
            SessionNotFoundException: If no session has this id
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundException(session_id)
        return session.thumbnail

    # Poll cycle

    async def _monitor_playback(self) -> None:
        while not self._stopping.is_set():
            await self.poll_once()
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self._poll_interval)
            except TimeoutError:
                pass

    async def poll_once(self) -> None:
        """Run one status, metadata and timeline pass against the focused session.

        Each phase is isolated: an unexpected error in one is logged and the
        remaining phases still run.
        """
        session = self._require_focused()
        for phase in (self._check_status, self._check_metadata, self._check_timeline):
            try:
                await phase(session)
            except Exception as e:
                log_with_context(
                    logger,
                    "error",
                    "Poll phase failed",
                    phase=phase.__name__,
                    session_id=session.id,
                    error=str(e),
                    error_type=type(e).__name__,
                    event_type="poll_phase_failed",
                )

    def _require_focused(self) -> Session:
        if self._focused_session_id is None:
            raise StoreStateException("Session store must be initialized before polling")
        return self._sessions[self._focused_session_id]

    async def _check_status(self, session: Session) -> None:
        status = _clean_text(await self.transport.get_status())
        if status is None:
            return

        async with self._lock:
            if status == session.playback_status:
                return
            previous = session.playback_status
            session.playback_status = status
            log_with_context(
                logger,
                "debug",
                "Playback status changed",
                session_id=session.id,
                previous=previous,
                status=status,
                event_type="playback_state_changed",
            )
            await self.events.playback_state_changed.emit(session.snapshot())

    async def _check_metadata(self, session: Session) -> None:
        artist, title = await asyncio.gather(self.transport.get_artist(), self.transport.get_title())
        artist = _clean_text(artist)
        title = _clean_text(title)

        async with self._lock:
            changed = False
            if artist is not None and artist != session.artist:
                session.artist = artist
                changed = True
            if title is not None and title != session.title:
                session.title = title
                changed = True
            if not changed:
                return

            generation = self._metadata_generation.get(session.id, 0) + 1
            self._metadata_generation[session.id] = generation
            log_with_context(
                logger,
                "info",
                "Now playing changed",
                session_id=session.id,
                artist=session.artist,
                title=session.title,
                event_type="media_changed",
            )
            await self.events.media_changed.emit(session.snapshot())

        self._spawn(
            self._update_cover_art(session.id, generation),
            name=f"media-sync-cover-{session.id}-{generation}",
        )

    async def _update_cover_art(self, session_id: str, generation: int) -> None:
        url = _clean_text(await self.transport.get_cover())
        if url is None:
            return

        image = await self.asset_cache.resolve(url)
        if image is None:
            return

        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return
            if self._metadata_generation.get(session_id) != generation:
                log_with_context(
                    logger,
                    "debug",
                    "Dropping cover art for a superseded track",
                    session_id=session_id,
                    cover_url=url,
                    event_type="cover_art_stale",
                )
                return
            session.thumbnail = image
            session.cover_url = url
            log_with_context(
                logger,
                "debug",
                "Cover art updated",
                session_id=session_id,
                cover_url=url,
                event_type="cover_art_updated",
            )
            await self.events.media_changed.emit(session.snapshot())

    async def _check_timeline(self, session: Session) -> None:
        position_text, duration_text = await asyncio.gather(
            self.transport.get_position(),
            self.transport.get_duration(),
        )
        position = _parse_seconds(position_text, "position")
        duration = _parse_seconds(duration_text, "duration")

        async with self._lock:
            changed = False
            if duration is not None and abs(duration - session.end_time) > DURATION_THRESHOLD:
                session.end_time = duration
                changed = True
            if position is not None and abs(position - session.position) > POSITION_THRESHOLD:
                session.position = position
                changed = True
            if changed:
                await self.events.timeline_changed.emit(session.snapshot())

    # Commands

    def play_pause(self) -> None:
        self._dispatch(TransportCommand.PLAY_PAUSE)

    def next(self) -> None:
        self._dispatch(TransportCommand.NEXT)

    def previous(self) -> None:
        self._dispatch(TransportCommand.PREVIOUS)

    def push_key(self, code: MediaKeyCode | int) -> None:
        """Dispatch the command bound to a media key; other keys only log a warning."""
        try:
            key: MediaKeyCode | None = MediaKeyCode(code)
        except ValueError:
            key = None

        command = KEY_COMMANDS.get(key) if key is not None else None
        if command is None:
            log_with_context(
                logger,
                "warning",
                "Unsupported media key",
                key_code=int(code),
                key_name=key.name if key is not None else None,
                event_type="unsupported_media_key",
            )
            return
        self._dispatch(command)

    def _dispatch(self, op: str) -> None:
        self._spawn(self._execute_command(op), name=f"media-sync-cmd-{op}")

    async def _execute_command(self, op: str) -> None:
        delivered = await self.transport.send_command(op)
        log_with_context(
            logger,
            "info" if delivered else "debug",
            "Transport command sent" if delivered else "Transport command not delivered",
            op=op,
            event_type="command_sent" if delivered else "command_failed",
        )

    # Background tasks

    def _spawn(self, coro: Coroutine[Any, Any, None], name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        self._background_tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log_with_context(
                logger,
                "error",
                "Background task failed",
                task=task.get_name(),
                error=str(exc),
                error_type=type(exc).__name__,
                event_type="background_task_failed",
            )
