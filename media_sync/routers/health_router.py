"""Health endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from media_sync import __version__
from media_sync.dependencies import get_session_store, get_transport_client
from media_sync.exceptions import TransportUnavailableException
from media_sync.models import DetailedHealthResponse, HealthResponse
from media_sync.services.transport_client import TransportClient
from media_sync.state_managers import SessionStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health check endpoint.

    Returns simple status for liveness probes.
    For dependency status, use `/health/ready`.
    """
    return HealthResponse(status="ok", version=__version__)


@router.get("/health/ready", response_model=DetailedHealthResponse)
async def readiness_check(
    store: SessionStore = Depends(get_session_store),
    transport: TransportClient = Depends(get_transport_client),
):
    """Readiness probe - is the store polling and the media endpoint reachable?

    **Returns:**
    - 200: Polling is running and the endpoint answers status requests
    - 503: One of the checks failed (consumers will see stale data)
    """
    checks = {}
    all_healthy = True

    checks["session_store"] = "ok" if store.is_running else "stopped"
    if not store.is_running:
        all_healthy = False

    try:
        await transport.check_reachable()
        checks["media_endpoint"] = "ok"
    except TransportUnavailableException as e:
        checks["media_endpoint"] = f"failed: {e.message[:80]}"
        all_healthy = False

    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content=DetailedHealthResponse(
            status="healthy" if all_healthy else "unhealthy",
            version=__version__,
            timestamp=datetime.now(UTC),
            checks=checks,
        ).model_dump(mode="json"),
    )
