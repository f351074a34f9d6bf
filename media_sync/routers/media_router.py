"""Now-playing session routes, transport commands and the event stream."""

import asyncio
from collections.abc import Callable
from io import BytesIO
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path, WebSocket, WebSocketDisconnect, status
from fastapi.responses import Response
from PIL import Image

from media_sync.dependencies import get_session_store
from media_sync.logging_config import get_logger, log_with_context
from media_sync.models import CommandResponse, ErrorResponse, MediaKeyCode, Session, SessionResponse
from media_sync.state_managers import SessionStore

router = APIRouter()
logger = get_logger(__name__)

# Events buffered per websocket client before new ones are dropped
EVENT_QUEUE_SIZE = 100


def _to_response(store: SessionStore, session: Session) -> SessionResponse:
    return SessionResponse.from_session(session, focused=session.id == store.focused_session_id)


def _encode_png(image: Image.Image) -> bytes:
    buf = BytesIO()
    image.save(buf, "PNG")
    return buf.getvalue()


@router.get(
    "/sessions",
    response_model=list[SessionResponse],
    summary="List tracked playback sessions",
)
async def list_sessions(store: SessionStore = Depends(get_session_store)):
    """Return every session the store tracks, marking the focused one."""
    return [_to_response(store, session) for session in store.sessions.values()]


@router.get(
    "/sessions/focused",
    response_model=SessionResponse,
    summary="Get the focused session",
    responses={404: {"model": ErrorResponse, "description": "Store has no focused session yet"}},
)
async def get_focused_session(store: SessionStore = Depends(get_session_store)):
    """Return the session currently selected for display and control."""
    session = store.get_focused_session()
    if session is None:
        raise HTTPException(status_code=404, detail="No focused session")
    return _to_response(store, session)


@router.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    summary="Get one session",
    responses={404: {"description": "Unknown session id"}},
)
async def get_session(
    session_id: str = Path(..., description="Session identifier"),
    store: SessionStore = Depends(get_session_store),
):
    """Return the last known state of one session."""
    return _to_response(store, store.get_session(session_id))


@router.get(
    "/sessions/{session_id}/thumbnail",
    summary="Get a session's cover art",
    description="Returns the decoded cover image re-encoded as PNG.",
    responses={
        200: {"content": {"image/png": {}}},
        404: {"description": "Unknown session id or no cover art known"},
    },
)
async def get_thumbnail(
    session_id: str = Path(..., description="Session identifier"),
    store: SessionStore = Depends(get_session_store),
):
    image = store.get_thumbnail(session_id)
    if image is None:
        raise HTTPException(status_code=404, detail="No cover art for this session")
    content = await asyncio.to_thread(_encode_png, image)
    return Response(content=content, media_type="image/png")


@router.post(
    "/play-pause",
    response_model=CommandResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Toggle playback",
)
async def play_pause(store: SessionStore = Depends(get_session_store)):
    """Toggle play/pause. The new state appears on the next poll."""
    store.play_pause()
    return CommandResponse(command="play-pause")


@router.post(
    "/next",
    response_model=CommandResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Skip to next track",
)
async def next_track(store: SessionStore = Depends(get_session_store)):
    store.next()
    return CommandResponse(command="next")


@router.post(
    "/previous",
    response_model=CommandResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Go to previous track",
)
async def previous_track(store: SessionStore = Depends(get_session_store)):
    store.previous()
    return CommandResponse(command="previous")


@router.post(
    "/keys/{code}",
    response_model=CommandResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Push a media key",
    description="""
    Push a media key by its virtual-key code (e.g. 179 for play/pause).

    Play/pause, next and previous are forwarded to the player. Other keys are
    accepted and logged as unsupported.
    """,
)
async def push_key(
    code: int = Path(..., ge=0, description="Virtual-key code"),
    store: SessionStore = Depends(get_session_store),
):
    store.push_key(code)
    try:
        name = MediaKeyCode(code).name
    except ValueError:
        name = str(code)
    return CommandResponse(command=name)


@router.websocket("/events")
async def session_events(websocket: WebSocket, store: SessionStore = Depends(get_session_store)):
    """Stream session notifications as JSON messages.

    The first message is a ``snapshot`` of the focused session; after that
    each message is ``{"event": <channel>, "session": {...}}``.
    """
    await websocket.accept()
    queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=EVENT_QUEUE_SIZE)

    def forward(channel: str) -> Callable[[Session], None]:
        def callback(session: Session) -> None:
            payload = {"event": channel, "session": _to_response(store, session).model_dump(mode="json")}
            try:
                queue.put_nowait(payload)
            except asyncio.QueueFull:
                log_with_context(
                    logger,
                    "debug",
                    "Websocket client too slow, dropping event",
                    channel=channel,
                    event_type="ws_event_dropped",
                )

        return callback

    unsubscribers = [ch.subscribe(forward(ch.name)) for ch in store.events.channels()]

    async def pump() -> None:
        while True:
            await websocket.send_json(await queue.get())

    focused = store.get_focused_session()
    if focused is not None:
        await websocket.send_json(
            {"event": "snapshot", "session": _to_response(store, focused).model_dump(mode="json")}
        )

    sender = asyncio.create_task(pump())
    try:
        while True:
            # Client messages are ignored; receiving only detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)
        for unsubscribe in unsubscribers:
            unsubscribe()
        log_with_context(
            logger,
            "debug",
            "Websocket client disconnected",
            event_type="ws_disconnected",
        )
