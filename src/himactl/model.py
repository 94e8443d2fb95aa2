from datetime import datetime, timezone
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from himactl.errors import ConfigurationError, TileFetchError

# Constants
TILE_WIDTH = 550
METADATA_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
OUTPUT_PREFIX = "himawari8"


class ResolutionLevel(IntEnum):
    """Number of tiles along each axis of the full-disk grid."""

    L4 = 4
    L8 = 8
    L16 = 16
    L20 = 20

    @classmethod
    def parse(cls, value: "str | int | ResolutionLevel") -> "ResolutionLevel":
        if isinstance(value, ResolutionLevel):
            return value
        try:
            return cls(int(value.strip() if isinstance(value, str) else value))
        except (TypeError, ValueError) as e:
            raise ConfigurationError("output-level", "Invalid level, use 4, 8, 16 or 20", e) from e

    @classmethod
    def default(cls) -> "ResolutionLevel":
        return cls.L8


class OutputFormat(Enum):
    PNG = "png"
    JPEG = "jpeg"

    @classmethod
    def parse(cls, value: "str | OutputFormat") -> "OutputFormat":
        if isinstance(value, OutputFormat):
            return value
        match value.strip():
            case "PNG" | "png":
                return cls.PNG
            case "JPEG" | "jpeg":
                return cls.JPEG
        raise ConfigurationError("output-format", "Invalid image format, use JPEG or PNG")

    @property
    def extension(self) -> str:
        return "png" if self is OutputFormat.PNG else "jpg"

    @property
    def pil_format(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.value


class Margins(BaseModel):
    """Pixel insets added around the tile grid."""

    model_config = ConfigDict(frozen=True)

    top: NonNegativeInt = 0
    right: NonNegativeInt = 0
    bottom: NonNegativeInt = 0
    left: NonNegativeInt = 0

    @classmethod
    def empty(cls) -> "Margins":
        return cls()

    @classmethod
    def parse(cls, value: "str | Margins") -> "Margins":
        """Parse ``TOP[,RIGHT][,BOTTOM][,LEFT]``.

        One value applies to every side, two values are vertical,horizontal, three
        values reuse TOP for the left side.

        Args:
            value (str | Margins): compact margins string, or an already parsed instance

        Returns:
            Margins: parsed margins

        Raises:
            ConfigurationError: on more than four fields, or any non numeric field
        """
        if isinstance(value, Margins):
            return value
        fields = [part.strip() for part in value.split(",")]
        if len(fields) > 4 or not all(part.isdecimal() for part in fields):
            raise ConfigurationError("margins", "Use format TOP[,RIGHT][,BOTTOM][,LEFT]")
        numbers = [int(part) for part in fields]
        top = numbers[0]
        right = numbers[1] if len(numbers) > 1 else top
        bottom = numbers[2] if len(numbers) > 2 else top
        if len(numbers) == 4:
            left = numbers[3]
        elif len(numbers) == 3:
            left = top
        else:
            left = right
        return cls(top=top, right=right, bottom=bottom, left=left)

    def __str__(self) -> str:
        return f"{self.top},{self.right},{self.bottom},{self.left}"


class LatestInfo(BaseModel):
    """Contents of the remote ``latest.json`` document."""

    date: str
    file: str = ""


class ImageTimestamp(BaseModel):
    """Acquisition time of a full-disk image, always UTC."""

    model_config = ConfigDict(frozen=True)

    value: datetime

    @classmethod
    def from_date_string(cls, date: str) -> "ImageTimestamp":
        parsed = datetime.strptime(date, METADATA_DATE_FORMAT)
        return cls(value=parsed.replace(tzinfo=timezone.utc))

    @property
    def year(self) -> str:
        return self.value.strftime("%Y")

    @property
    def month(self) -> str:
        return self.value.strftime("%m")

    @property
    def day(self) -> str:
        return self.value.strftime("%d")

    @property
    def time(self) -> str:
        return self.value.strftime("%H%M%S")

    @property
    def compact_date(self) -> str:
        return self.value.strftime("%Y%m%d")

    def __str__(self) -> str:
        return self.value.strftime(METADATA_DATE_FORMAT)


class TileCoordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: NonNegativeInt
    y: NonNegativeInt

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


class TileResult(BaseModel):
    """Outcome of fetching one tile: either a decoded image or the error that prevented it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    coordinate: TileCoordinate
    url: str
    image: Image.Image | None = None
    error: TileFetchError | None = None

    @property
    def ok(self) -> bool:
        return self.image is not None


class OutputTarget(BaseModel):
    path: Path
    format: OutputFormat
    store_latest_only: bool = False
    force: bool = False

    @property
    def should_skip(self) -> bool:
        """True when an earlier run already produced this exact file and nothing asks to redo it."""
        return self.path.exists() and not self.force and not self.store_latest_only


class RunStatus(Enum):
    SKIPPED = "skipped"
    SAVED = "saved"


class RunResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: RunStatus
    target: OutputTarget
    timestamp: ImageTimestamp
    fetched: list[TileCoordinate] = Field(default_factory=list)
    missing: list[TileCoordinate] = Field(default_factory=list)
    wallpaper_error: str | None = None


class ProgressEventType(Enum):
    TASK_CREATED = "task_created"
    TASK_COMPLETED = "task_completed"
    BATCH_STARTED = "batch_started"
    BATCH_COMPLETED = "batch_completed"


class ProgressEvent(BaseModel):
    type: ProgressEventType
    task_id: str
    data: dict[str, Any]
