"""Main FastAPI application entry point."""

from pathlib import Path

from dotenv import load_dotenv

from media_sync.config import get_settings
from media_sync.core.app_factory import create_app
from media_sync.logging_config import setup_logging

# Load environment variables from .env file
load_dotenv(Path(__file__).parent.parent / ".env")

# Configure structured logging (JSON to file + console)
setup_logging(get_settings().log_level)

# Create application
app = create_app()


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Media Sync API", "docs": "/docs"}


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "media_sync.main:app",
        host=settings.api_host,
        port=settings.api_port,
    )


if __name__ == "__main__":
    run()
