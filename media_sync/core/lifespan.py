"""Application lifespan management."""

import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI

from media_sync import __version__
from media_sync.asset_cache import AssetCache
from media_sync.config import Settings, get_settings
from media_sync.logging_config import get_logger, log_with_context
from media_sync.middleware.logging_middleware import redact_sensitive_data
from media_sync.services.transport_client import TransportClient
from media_sync.state_managers import SessionStore

logger = get_logger(__name__)


async def log_request(request: httpx.Request) -> None:
    """Event hook to log requests with redacted sensitive data."""
    log_with_context(
        logger,
        "debug",
        "HTTP Request",
        method=request.method,
        url=redact_sensitive_data(str(request.url)),
        event_type="http_request",
    )


async def log_response(response: httpx.Response) -> None:
    """Event hook to log responses with redacted sensitive data."""
    log_with_context(
        logger,
        "debug",
        "HTTP Response",
        status_code=response.status_code,
        url=redact_sensitive_data(str(response.request.url)),
        event_type="http_response",
    )


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared HTTP client used for field polling and cover art.

    Args:
        settings: Application settings

    Returns:
        Configured AsyncClient with pooled connections
    """
    event_hooks: dict[str, list[Callable[..., Any]]] = {
        "request": [log_request],
        "response": [log_response],
    }
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=settings.request_timeout_seconds,  # Local endpoint: fail fast
            read=10.0,  # Cover art may come from a remote CDN
            write=5.0,
            pool=5.0,
        ),
        limits=httpx.Limits(
            max_keepalive_connections=5,
            max_connections=10,
            keepalive_expiry=30.0,
        ),
        follow_redirects=True,
        event_hooks=event_hooks,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events.

    Builds the HTTP client, transport client, asset cache and session store,
    starts polling, and tears everything down in reverse order on shutdown.
    Exceptions after yield are re-raised so cleanup is never skipped silently.
    """
    settings = get_settings()
    app.state.startup_time = time.time()

    log_with_context(
        logger,
        "info",
        "Starting Media Sync application",
        version=__version__,
        transport_url=settings.transport_url,
        event_type="app_startup",
    )

    client = build_http_client(settings)
    app.state.http_client = client

    transport = TransportClient(client, settings.transport_url, timeout=settings.request_timeout_seconds)
    store = SessionStore(transport, AssetCache(client), settings)
    app.state.transport_client = transport
    app.state.session_store = store

    await store.initialize()
    await store.start()
    log_with_context(
        logger,
        "info",
        "Session store initialized",
        session_id=store.focused_session_id,
        event_type="session_store_ready",
    )

    try:
        yield
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Application error during lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_error",
        )
        raise
    finally:
        log_with_context(
            logger,
            "info",
            "Shutting down Media Sync application",
            event_type="app_shutdown",
        )

        await store.cleanup()
        log_with_context(
            logger,
            "info",
            "Session store cleaned up",
            event_type="session_store_cleanup",
        )

        await client.aclose()
        log_with_context(
            logger,
            "info",
            "HTTP client closed",
            event_type="http_client_cleanup",
        )
