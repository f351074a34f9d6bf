"""FastAPI dependencies for dependency injection."""

from fastapi.requests import HTTPConnection

from media_sync.services.transport_client import TransportClient
from media_sync.state_managers import SessionStore


async def get_session_store(request: HTTPConnection) -> SessionStore:
    """
    Get the session store from app state.

    Args:
        request: The incoming HTTP or WebSocket connection.

    Returns:
        The shared SessionStore instance.

    Raises:
        RuntimeError: If the session store is not initialized.
    """
    store: SessionStore | None = getattr(request.app.state, "session_store", None)

    if store is None:
        raise RuntimeError("Session store not initialized.")

    return store


async def get_transport_client(request: HTTPConnection) -> TransportClient:
    """
    Get the media endpoint client from app state.

    Args:
        request: The incoming HTTP or WebSocket connection.

    Returns:
        The shared TransportClient instance.

    Raises:
        RuntimeError: If the transport client is not initialized.
    """
    transport: TransportClient | None = getattr(request.app.state, "transport_client", None)

    if transport is None:
        raise RuntimeError("Transport client not initialized.")

    return transport
