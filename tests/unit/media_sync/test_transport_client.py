"""Unit tests for the media endpoint transport client."""

from unittest.mock import MagicMock

import httpx
import pytest

from media_sync.exceptions import TransportUnavailableException
from media_sync.services.transport_client import TransportClient


@pytest.mark.asyncio
async def test_fetch_field_returns_raw_body(transport_client, media_endpoint):
    """Test a successful fetch returns the body untouched."""
    media_endpoint.fields["title"] = "Bohemian Rhapsody\n"

    result = await transport_client.fetch_field("title")

    assert result == "Bohemian Rhapsody\n"
    assert media_endpoint.requests == ["title"]


@pytest.mark.asyncio
async def test_fetch_field_empty_body_is_success(transport_client, media_endpoint):
    """Test an empty body is returned as empty text, not as a failure."""
    media_endpoint.fields["cover"] = ""

    assert await transport_client.fetch_field("cover") == ""


@pytest.mark.asyncio
async def test_fetch_field_connection_error_returns_none(transport_client, media_endpoint):
    """Test network failures come back as None instead of raising."""
    media_endpoint.failing.add("status")

    assert await transport_client.fetch_field("status") is None


@pytest.mark.asyncio
async def test_fetch_field_error_status_returns_none(transport_client, media_endpoint):
    """Test non-2xx responses are treated as failures."""
    assert "metadata" not in media_endpoint.fields

    assert await transport_client.fetch_field("metadata") is None


@pytest.mark.asyncio
async def test_fetch_field_does_not_retry(transport_client, media_endpoint):
    """Test a failed fetch is attempted exactly once."""
    media_endpoint.failing.add("artist")

    await transport_client.fetch_field("artist")

    assert media_endpoint.count("artist") == 1


@pytest.mark.asyncio
async def test_send_command_uses_query_parameter(transport_client, media_endpoint):
    """Test commands go to /cmd with the op query parameter."""
    assert await transport_client.send_command("play-pause") is True
    assert await transport_client.send_command("next") is True

    assert media_endpoint.commands == ["play-pause", "next"]
    assert media_endpoint.requests == ["cmd", "cmd"]


@pytest.mark.asyncio
async def test_send_command_failure_returns_false(transport_client, media_endpoint):
    """Test an undeliverable command reports False."""
    media_endpoint.failing.add("cmd")

    assert await transport_client.send_command("previous") is False


@pytest.mark.asyncio
async def test_named_getters_map_to_field_paths(transport_client, media_endpoint):
    """Test each convenience getter requests its own path."""
    media_endpoint.fields.update({"metadata": "{}", "cover": "http://art.test/a.png"})

    assert await transport_client.get_status() == "Playing"
    assert await transport_client.get_artist() == "Test Artist"
    assert await transport_client.get_title() == "Test Song"
    assert await transport_client.get_position() == "10.0"
    assert await transport_client.get_duration() == "240.0"
    assert await transport_client.get_cover() == "http://art.test/a.png"
    assert await transport_client.get_metadata() == "{}"

    assert media_endpoint.requests == ["status", "artist", "title", "position", "duration", "cover", "metadata"]


def test_base_url_trailing_slash_stripped(http_client):
    """Test the base URL is normalized so paths join cleanly."""
    client = TransportClient(http_client, "http://127.0.0.1:6767/")

    assert client.base_url == "http://127.0.0.1:6767"


@pytest.mark.asyncio
async def test_timeout_override_passed_to_client(mock_http_client):
    """Test the per-request timeout is forwarded to httpx."""
    response = MagicMock()
    response.text = "Paused"
    response.raise_for_status = lambda: None
    mock_http_client.get.return_value = response

    client = TransportClient(mock_http_client, "http://127.0.0.1:6767", timeout=1.5)
    result = await client.fetch_field("status")

    assert result == "Paused"
    mock_http_client.get.assert_called_once_with("http://127.0.0.1:6767/status", params=None, timeout=1.5)


@pytest.mark.asyncio
async def test_timeout_error_returns_none(mock_http_client):
    """Test a read timeout is handled like any other transport failure."""
    mock_http_client.get.side_effect = httpx.ReadTimeout("timed out")

    client = TransportClient(mock_http_client, "http://127.0.0.1:6767")

    assert await client.fetch_field("position") is None


@pytest.mark.asyncio
async def test_check_reachable_success(transport_client):
    """Test reachability check passes when status answers."""
    await transport_client.check_reachable()


@pytest.mark.asyncio
async def test_check_reachable_raises_when_down(transport_client, media_endpoint):
    """Test reachability check raises a 503-mapped exception."""
    media_endpoint.failing.add("status")

    with pytest.raises(TransportUnavailableException) as exc_info:
        await transport_client.check_reachable()

    assert exc_info.value.status_code == 503
    assert exc_info.value.details["base_url"] == "http://media.test"
