"""HTTP client for the local media-control endpoint (playerctl bridge)."""

import httpx

from media_sync.exceptions import TransportUnavailableException
from media_sync.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


class TransportClient:
    """Stateless request/response client for the media-control endpoint.

    Each field is read with a single GET against ``{base_url}/{field}``.
    Failures are returned as ``None`` (fields) or ``False`` (commands) and
    never raised: the caller treats them as "no new information this cycle".
    Nothing here retries; the next poll does that naturally.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str, timeout: float | None = None):
        """Initialize the transport client.

        Args:
            client: Shared HTTP client from the application lifespan
            base_url: Endpoint base address, e.g. ``http://127.0.0.1:6767``
            timeout: Per-request timeout override in seconds
        """
        self._client = client
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def _get(self, path: str, params: dict[str, str] | None = None) -> str | None:
        url = f"{self.base_url}/{path}"
        try:
            if self._timeout is None:
                response = await self._client.get(url, params=params)
            else:
                response = await self._client.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
            return response.text
        except httpx.HTTPStatusError as e:
            log_with_context(
                logger,
                "debug",
                "Media endpoint returned error status",
                path=path,
                status_code=e.response.status_code,
                event_type="transport_http_error",
            )
            return None
        except httpx.HTTPError as e:
            log_with_context(
                logger,
                "debug",
                "Media endpoint request failed",
                path=path,
                error=str(e),
                error_type=type(e).__name__,
                event_type="transport_request_failed",
            )
            return None

    async def fetch_field(self, name: str) -> str | None:
        """Fetch one field from the endpoint.

        Args:
            name: Field name (status, title, artist, duration, position, cover, metadata)

        Returns:
            Raw response body, or None if the request did not succeed.
        """
        return await self._get(name)

    async def send_command(self, op: str) -> bool:
        """Issue a transport command via ``/cmd?op=...``.

        Args:
            op: Command name (play-pause, next, previous)

        Returns:
            True if the endpoint accepted the request. The body is discarded.
        """
        result = await self._get("cmd", params={"op": op})
        if result is None:
            log_with_context(
                logger,
                "debug",
                "Transport command not delivered",
                op=op,
                event_type="transport_command_failed",
            )
            return False
        return True

    async def check_reachable(self) -> None:
        """Raise if the endpoint cannot answer a status request.

        Raises:
            TransportUnavailableException: If the status fetch fails
        """
        if await self.fetch_field("status") is None:
            raise TransportUnavailableException(
                f"Cannot reach media endpoint at {self.base_url}",
                details={"base_url": self.base_url},
            )

    async def get_status(self) -> str | None:
        return await self.fetch_field("status")

    async def get_metadata(self) -> str | None:
        return await self.fetch_field("metadata")

    async def get_artist(self) -> str | None:
        return await self.fetch_field("artist")

    async def get_title(self) -> str | None:
        return await self.fetch_field("title")

    async def get_duration(self) -> str | None:
        return await self.fetch_field("duration")

    async def get_position(self) -> str | None:
        return await self.fetch_field("position")

    async def get_cover(self) -> str | None:
        return await self.fetch_field("cover")
