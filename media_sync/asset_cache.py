"""In-memory cache for decoded cover-art images."""

import asyncio
from io import BytesIO
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx
from PIL import Image

from media_sync.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


def decode_image(data: bytes) -> Image.Image | None:
    """Decode raw bytes into a fully loaded image, or None if they aren't one."""
    try:
        image = Image.open(BytesIO(data))
        image.load()
        return image
    except (OSError, EOFError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        log_with_context(
            logger,
            "debug",
            "Cover art could not be decoded",
            size=len(data),
            error=str(e),
            event_type="asset_decode_failed",
        )
        return None


class AssetCache:
    """URL-keyed cache of decoded cover-art images.

    Entries are inserted only after a successful decode and never evicted.
    Concurrent misses for the same URL share one in-flight fetch.
    Thread-safe for async operations using asyncio.Lock.
    """

    def __init__(self, client: httpx.AsyncClient):
        self._client = client
        self._cache: dict[str, Image.Image] = {}
        self._inflight: dict[str, asyncio.Task[Image.Image | None]] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, url: str) -> bool:
        return url in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    async def get(self, url: str) -> Image.Image | None:
        """Return the cached image for url without fetching."""
        async with self._lock:
            return self._cache.get(url)

    async def resolve(self, url: str) -> Image.Image | None:
        """Return the decoded image for url, fetching it on first reference.

        Args:
            url: Cover-art URL (http, https or file)

        Returns:
            Cached or freshly decoded image, or None if fetch or decode failed
        """
        async with self._lock:
            image = self._cache.get(url)
            if image is not None:
                log_with_context(
                    logger,
                    "debug",
                    "Cache hit",
                    cache_key=url,
                    event_type="asset_cache_hit",
                )
                return image

            task = self._inflight.get(url)
            if task is None:
                log_with_context(
                    logger,
                    "debug",
                    "Cache miss, fetching cover art",
                    cache_key=url,
                    event_type="asset_cache_miss",
                )
                task = asyncio.create_task(self._fetch_and_store(url))
                self._inflight[url] = task

        # A cancelled waiter must not cancel the fetch other waiters share
        return await asyncio.shield(task)

    async def _fetch_and_store(self, url: str) -> Image.Image | None:
        image = None
        try:
            data = await self._read(url)
            if data:
                image = await asyncio.to_thread(decode_image, data)
        finally:
            async with self._lock:
                self._inflight.pop(url, None)
                if image is not None:
                    self._cache[url] = image
                    log_with_context(
                        logger,
                        "debug",
                        "Cache set",
                        cache_key=url,
                        size=image.size,
                        event_type="asset_cache_set",
                    )
        return image

    async def _read(self, url: str) -> bytes | None:
        parsed = urlparse(url)
        if parsed.scheme == "file":
            return await asyncio.to_thread(self._read_file, Path(url2pathname(parsed.path)))
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            log_with_context(
                logger,
                "debug",
                "Cover art URL not fetchable",
                url=url,
                scheme=parsed.scheme,
                event_type="asset_fetch_failed",
            )
            return None

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log_with_context(
                logger,
                "debug",
                "Cover art fetch failed",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
                event_type="asset_fetch_failed",
            )
            return None
        return response.content

    @staticmethod
    def _read_file(path: Path) -> bytes | None:
        try:
            return path.read_bytes()
        except OSError as e:
            log_with_context(
                logger,
                "debug",
                "Cover art file unreadable",
                path=str(path),
                error=str(e),
                event_type="asset_fetch_failed",
            )
            return None
