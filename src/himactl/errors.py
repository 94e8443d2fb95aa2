"""Error taxonomy for himactl.

Every error carries a short classification tag (``kind``) and, optionally, the
underlying exception that caused it. The string form is ``[kind] message`` so the
tag is always visible in logs, while callers can discriminate on the class.
"""

from enum import Enum


class HimaCtlError(Exception):
    """Base class for all himactl errors."""

    def __init__(self, kind: str, message: str, cause: BaseException | None = None) -> None:
        super().__init__(f"[{kind}] {message}")
        self.kind = kind
        self.message = message
        self.cause = cause


class ConfigurationError(HimaCtlError):
    """Invalid user input, rejected before any network activity."""


class MetadataError(HimaCtlError):
    """The latest-image metadata document could not be fetched or parsed."""


class ClockError(HimaCtlError):
    """The system clock could not produce a usable timestamp."""


class PersistenceError(HimaCtlError):
    """The output directory or the output image could not be written."""


class PlatformError(HimaCtlError):
    """A platform integration (e.g. setting the wallpaper) failed."""


class FetchFailure(Enum):
    TRANSPORT = "transport"
    STATUS = "status"
    DECODE = "decode"


class TileFetchError(HimaCtlError):
    """A single tile could not be fetched or decoded.

    These are soft failures: the pipeline logs them and leaves a hole in the canvas.
    """

    def __init__(
        self,
        reason: FetchFailure,
        url: str,
        message: str,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(f"tile-{reason.value}", message, cause=cause)
        self.reason = reason
        self.url = url
        self.status_code = status_code
