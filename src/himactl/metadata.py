import logging
import time
from typing import Callable

import requests
from pydantic import ValidationError

from himactl.errors import ClockError, MetadataError
from himactl.model import ImageTimestamp, LatestInfo

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://himawari8-dl.nict.go.jp/himawari8/img/D531106"
DEFAULT_METADATA_TIMEOUT = 30
METADATA_DOCUMENT = "latest.json"


def cache_buster(clock: Callable[[], float] = time.time) -> int:
    """Current unix time in seconds, used to defeat intermediate caches.

    Raises:
        ClockError: when the clock reports a time before the unix epoch
    """
    now = clock()
    if now < 0:
        raise ClockError("system-time", f"System clock is before the unix epoch ({now})")
    return int(now)


class MetadataResolver:
    """Resolves the acquisition time of the most recent full-disk image."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_METADATA_TIMEOUT,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.clock = clock

    @property
    def url(self) -> str:
        return f"{self.base_url}/{METADATA_DOCUMENT}"

    def fetch_info(self) -> LatestInfo:
        """Download and validate the metadata document.

        Returns:
            LatestInfo: the parsed document

        Raises:
            MetadataError: on transport, status or parsing failures
            ClockError: when the cache buster cannot be computed
        """
        params = {"_": cache_buster(self.clock)}
        log.debug("Fetching latest image metadata from %s", self.url)
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise MetadataError("metadata-status", f"Request {self.url} failed with {e.response.status_code}", e) from e
        except requests.exceptions.RequestException as e:
            raise MetadataError("metadata-transport", f"Request {self.url} failed: {e}", e) from e

        try:
            return LatestInfo.model_validate_json(response.content)
        except ValidationError as e:
            raise MetadataError("metadata-json", f"Malformed metadata document: {e}", e) from e

    def resolve_latest(self) -> ImageTimestamp:
        info = self.fetch_info()
        try:
            timestamp = ImageTimestamp.from_date_string(info.date)
        except ValueError as e:
            raise MetadataError("metadata-date", f"Malformed date '{info.date}': {e}", e) from e
        log.info("Latest image is from %s UTC (%s)", timestamp, info.file or "no file name")
        return timestamp
