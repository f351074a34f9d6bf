"""Media Sync models"""

from media_sync.models.base_models import DetailedHealthResponse, ErrorResponse, HealthResponse
from media_sync.models.media import KEY_COMMANDS, CommandResponse, MediaKeyCode, TransportCommand
from media_sync.models.session import Session, SessionResponse

__all__ = [
    "DetailedHealthResponse",
    "ErrorResponse",
    "HealthResponse",
    "KEY_COMMANDS",
    "CommandResponse",
    "MediaKeyCode",
    "TransportCommand",
    "Session",
    "SessionResponse",
]
