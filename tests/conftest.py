"""Pytest configuration and shared fixtures."""

from io import BytesIO
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from PIL import Image

from media_sync.asset_cache import AssetCache
from media_sync.config import Settings
from media_sync.services.transport_client import TransportClient
from media_sync.state_managers import SessionStore

MEDIA_BASE_URL = "http://media.test"


class FakeMediaEndpoint:
    """In-process stand-in for the playerctl bridge and cover-art hosts.

    ``fields`` maps field names to response bodies, ``failing`` holds paths
    that raise a connection error, ``assets`` maps absolute URLs to bytes.
    Every request path is recorded in ``requests``; delivered commands in
    ``commands``.
    """

    def __init__(self):
        self.fields: dict[str, str] = {}
        self.failing: set[str] = set()
        self.assets: dict[str, bytes] = {}
        self.requests: list[str] = []
        self.asset_requests: list[str] = []
        self.commands: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if request.url.host != "media.test":
            self.asset_requests.append(url)
            if url in self.failing:
                raise httpx.ConnectError("Connection refused", request=request)
            if url in self.assets:
                return httpx.Response(200, content=self.assets[url])
            return httpx.Response(404)

        path = request.url.path.lstrip("/")
        self.requests.append(path)
        if path in self.failing:
            raise httpx.ConnectError("Connection refused", request=request)
        if path == "cmd":
            self.commands.append(request.url.params["op"])
            return httpx.Response(200, text="ok")
        if path in self.fields:
            return httpx.Response(200, text=self.fields[path])
        return httpx.Response(404, text="unknown field")

    def count(self, path: str) -> int:
        return self.requests.count(path)


@pytest.fixture
def mock_settings():
    """Settings instance with test values and a fast poll interval."""
    return Settings(
        transport_url=MEDIA_BASE_URL,
        request_timeout_seconds=1.0,
        poll_interval_seconds=0.01,
        default_session_id="playerctl-default",
        api_host="127.0.0.1",
        api_port=8000,
        log_level="DEBUG",
    )


@pytest.fixture
def media_endpoint():
    """Fake media endpoint reporting a playing track."""
    endpoint = FakeMediaEndpoint()
    endpoint.fields.update(
        {
            "status": "Playing",
            "artist": "Test Artist",
            "title": "Test Song",
            "position": "10.0",
            "duration": "240.0",
        }
    )
    return endpoint


@pytest_asyncio.fixture
async def http_client(media_endpoint):
    """httpx client routed to the fake endpoint."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(media_endpoint.handler)) as client:
        yield client


@pytest.fixture
def transport_client(http_client):
    return TransportClient(http_client, MEDIA_BASE_URL)


@pytest.fixture
def asset_cache(http_client):
    return AssetCache(http_client)


@pytest_asyncio.fixture
async def session_store(transport_client, asset_cache, mock_settings):
    """Session store wired to the fake endpoint; cleaned up after the test."""
    store = SessionStore(transport_client, asset_cache, mock_settings)
    yield store
    await store.cleanup()


@pytest.fixture
def png_bytes():
    """A small valid PNG image."""
    buf = BytesIO()
    Image.new("RGB", (4, 4), "red").save(buf, "PNG")
    return buf.getvalue()


@pytest.fixture
def mock_http_client():
    """Mock httpx.AsyncClient for asserting call arguments."""
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get = AsyncMock()
    mock_client.aclose = AsyncMock()
    return mock_client
