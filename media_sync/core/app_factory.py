"""Application factory for creating and configuring the FastAPI app."""

from fastapi import FastAPI

from media_sync import __version__
from media_sync.core.lifespan import lifespan
from media_sync.middleware.error_handlers import register_error_handlers
from media_sync.routers import health_router, media_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Media Sync API",
        description="""
        **Media Sync** - what is playing right now, kept in sync with a local playerctl bridge

        ## Sessions
        - `/api/media/sessions` - all tracked sessions
        - `/api/media/sessions/focused` - the session selected for display
        - `/api/media/sessions/{id}/thumbnail` - cover art as PNG

        ## Commands
        Commands are fire-and-forget and answer `202 Accepted`. Their effect
        shows up in the session state after the next poll.

        ## Events
        `ws /api/media/events` streams focus, playback state, metadata and
        timeline changes.

        ## Health
        - `/health` - liveness
        - `/health/ready` - polling running and media endpoint reachable
        """,
        version=__version__,
        lifespan=lifespan,
        license_info={
            "name": "MIT",
        },
    )

    register_error_handlers(app)

    app.include_router(health_router.router, tags=["health"])
    app.include_router(media_router.router, prefix="/api/media", tags=["media"])

    return app
