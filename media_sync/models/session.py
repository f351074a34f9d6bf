"""Session state models."""

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, computed_field


class Session(BaseModel):
    """Current known state of one playback source.

    The thumbnail is a non-owning reference: the decoded image belongs to the
    store's AssetCache and is shared by every session and snapshot that shows it.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str

    # Descriptive fields
    title: str = ""
    artist: str = ""
    genres: list[str] = Field(default_factory=list)
    track_number: int = 0
    album_title: str = ""
    album_artist: str = ""
    album_track_count: int = 0

    # Timeline, in seconds
    start_time: float = 0.0
    end_time: float = 0.0
    position: float = 0.0

    playback_status: str = ""

    thumbnail: Image.Image | None = Field(default=None, exclude=True, repr=False)
    cover_url: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_thumbnail(self) -> bool:
        return self.thumbnail is not None

    def snapshot(self) -> "Session":
        """Copy handed to subscribers so later poll updates don't leak into it."""
        return self.model_copy(update={"genres": list(self.genres)})


class SessionResponse(BaseModel):
    """Session as exposed over the API (thumbnail served separately)."""

    id: str
    title: str
    artist: str
    genres: list[str]
    track_number: int
    album_title: str
    album_artist: str
    album_track_count: int
    start_time: float
    end_time: float
    position: float
    playback_status: str
    cover_url: str | None = None
    has_thumbnail: bool = False
    focused: bool = False

    @classmethod
    def from_session(cls, session: Session, focused: bool = False) -> "SessionResponse":
        return cls(**session.model_dump(), focused=focused)
