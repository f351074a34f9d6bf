"""Media key codes and command payloads."""

from enum import IntEnum

from pydantic import BaseModel, Field


class MediaKeyCode(IntEnum):
    """Media keys a consumer may push, using the Windows virtual-key values."""

    VOLUME_MUTE = 0xAD
    VOLUME_DOWN = 0xAE
    VOLUME_UP = 0xAF
    NEXT_TRACK = 0xB0
    PREVIOUS_TRACK = 0xB1
    STOP = 0xB2
    PLAY_PAUSE = 0xB3


class TransportCommand:
    """Operation names accepted by the endpoint's /cmd path."""

    PLAY_PAUSE = "play-pause"
    NEXT = "next"
    PREVIOUS = "previous"


# Keys the transport can act on; everything else is reported and ignored
KEY_COMMANDS: dict[MediaKeyCode, str] = {
    MediaKeyCode.PLAY_PAUSE: TransportCommand.PLAY_PAUSE,
    MediaKeyCode.NEXT_TRACK: TransportCommand.NEXT,
    MediaKeyCode.PREVIOUS_TRACK: TransportCommand.PREVIOUS,
}


class CommandResponse(BaseModel):
    """Acknowledgement for a fire-and-forget command."""

    status: str = Field(default="accepted", description="Always 'accepted'; effects show up on the next poll")
    command: str = Field(..., description="Command or key that was dispatched")
