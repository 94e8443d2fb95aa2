import logging
from io import BytesIO

import requests
from PIL import Image, UnidentifiedImageError
from requests.adapters import HTTPAdapter

from himactl.errors import FetchFailure, TileFetchError
from himactl.fetchers.base import TileFetcher
from himactl.model import ProgressEventType
from himactl.progress.events import emit_event

log = logging.getLogger(__name__)

# HTTP fetcher configuration defaults
DEFAULT_MAX_RETRIES = 1
DEFAULT_TIMEOUT_SECONDS = 120
DEFAULT_POOL_CONNECTIONS = 10
DEFAULT_POOL_MAX_SIZE = 10


class HTTPTileFetcher(TileFetcher):
    """HTTP tile fetcher with a pooled session, bounded timeouts and optional retries."""

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        pool_connections: int = DEFAULT_POOL_CONNECTIONS,
        pool_maxsize: int = DEFAULT_POOL_MAX_SIZE,
    ):
        self.max_retries = max(1, max_retries)
        self.timeout = timeout
        self.pool_conns = pool_connections
        self.pool_size = pool_maxsize
        self.session: requests.Session | None = None

    def init(self, session: requests.Session | None = None, pool_maxsize: int | None = None, **kwargs) -> None:
        if pool_maxsize:
            self.pool_size = pool_maxsize
        if not session:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=self.pool_conns, pool_maxsize=self.pool_size)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session

    def fetch_tile(self, url: str, item_id: str | None = None) -> Image.Image:
        """
        Download a PNG tile, retrying transport and status failures, and decode it.
        """
        if self.session is None:
            self.init()
        task_id = f"tile_{item_id or url}"
        emit_event(ProgressEventType.TASK_CREATED, task_id=task_id, description="tile")

        try:
            content = self._download(url)
            image = self._decode(url, content)
        except TileFetchError as e:
            emit_event(
                ProgressEventType.TASK_COMPLETED,
                task_id=task_id,
                success=False,
                description=f"failed: {e.reason.value}",
            )
            raise

        emit_event(ProgressEventType.TASK_COMPLETED, task_id=task_id, success=True)
        return image

    def _download(self, url: str) -> bytes:
        error: TileFetchError | None = None
        for attempt in range(self.max_retries):
            log.debug("Downloading %s (attempt %s/%s)", url, attempt + 1, self.max_retries)
            try:
                response = self.session.get(url, timeout=self.timeout)
            except requests.exceptions.Timeout as e:
                log.debug("Timeout downloading %s on attempt %s", url, attempt + 1)
                error = TileFetchError(FetchFailure.TRANSPORT, url, f"timed out fetching {url}", cause=e)
                continue
            except requests.exceptions.RequestException as e:
                log.debug("Request error downloading %s on attempt %s: %s", url, attempt + 1, e)
                error = TileFetchError(FetchFailure.TRANSPORT, url, f"request to {url} failed: {e}", cause=e)
                continue

            if not response.ok:
                log.debug("Unexpected status %s for %s on attempt %s", response.status_code, url, attempt + 1)
                error = TileFetchError(
                    FetchFailure.STATUS,
                    url,
                    f"request {url} failed with {response.status_code}",
                    status_code=response.status_code,
                )
                continue

            log.debug("Successfully downloaded %s (%s bytes)", url, len(response.content))
            return response.content

        assert error is not None
        raise error

    def _decode(self, url: str, content: bytes) -> Image.Image:
        try:
            with Image.open(BytesIO(content), formats=["PNG"]) as image:
                return image.convert("RGBA")
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
            raise TileFetchError(FetchFailure.DECODE, url, f"cannot decode tile {url}: {e}", cause=e) from e

    def close(self) -> None:
        if self.session:
            self.session.close()
            self.session = None
