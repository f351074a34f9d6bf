"""Unit tests for session event channels."""

import logging

import pytest

from media_sync.events import EventChannel, SessionEvents
from media_sync.models.session import Session


@pytest.mark.asyncio
async def test_emit_reaches_sync_and_async_subscribers():
    """Test plain functions and coroutine functions both receive the session."""
    channel = EventChannel("media_changed")
    received = []

    async def async_callback(session):
        received.append(("async", session.id))

    channel.subscribe(lambda session: received.append(("sync", session.id)))
    channel.subscribe(async_callback)

    await channel.emit(Session(id="s1"))

    assert received == [("sync", "s1"), ("async", "s1")]


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery():
    """Test the returned unsubscribe function removes the callback."""
    channel = EventChannel("timeline_changed")
    received = []

    unsubscribe = channel.subscribe(received.append)
    await channel.emit(Session(id="s1"))
    unsubscribe()
    unsubscribe()  # second call is a no-op
    await channel.emit(Session(id="s1"))

    assert len(received) == 1
    assert len(channel) == 0


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_block_others(caplog):
    """Test one broken subscriber is logged and the rest still get the event."""
    channel = EventChannel("playback_state_changed")
    received = []

    def broken(session):
        raise RuntimeError("render failed")

    channel.subscribe(broken)
    channel.subscribe(received.append)

    with caplog.at_level(logging.ERROR, logger="media_sync.events"):
        await channel.emit(Session(id="s1"))

    assert len(received) == 1
    assert "Event subscriber failed" in caplog.text


@pytest.mark.asyncio
async def test_subscriber_may_unsubscribe_during_emit():
    """Test a callback can remove itself while the channel is emitting."""
    channel = EventChannel("session_focused")
    received = []
    unsubscribe = None

    def once(session):
        received.append(session.id)
        unsubscribe()

    unsubscribe = channel.subscribe(once)
    await channel.emit(Session(id="a"))
    await channel.emit(Session(id="b"))

    assert received == ["a"]


def test_session_events_channels():
    """Test the store exposes exactly the four notification channels."""
    events = SessionEvents()

    names = [channel.name for channel in events.channels()]

    assert names == ["session_focused", "playback_state_changed", "media_changed", "timeline_changed"]
