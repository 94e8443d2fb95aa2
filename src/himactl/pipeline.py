"""Fetch-and-compose pipeline for the latest full-disk image.

The run is linear: resolve the latest timestamp, compute the output path, skip
if that file already exists (unless forced), fetch every tile of the grid on a
bounded thread pool, compose the successful tiles onto one canvas, persist it,
and optionally hand it over to the desktop as wallpaper.

Tile failures never abort the run, they become holes in the image. Metadata,
directory and persistence failures are fatal and propagate to the caller.
"""

import logging
import os
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from PIL import Image

from himactl.compositor import Compositor
from himactl.errors import FetchFailure, PlatformError, TileFetchError
from himactl.fetchers import TileFetcher
from himactl.grid import plan, tile_url
from himactl.metadata import MetadataResolver
from himactl.model import (
    TILE_WIDTH,
    ImageTimestamp,
    Margins,
    OutputFormat,
    OutputTarget,
    ProgressEventType,
    ResolutionLevel,
    RunResult,
    RunStatus,
    TileCoordinate,
    TileResult,
)
from himactl.output import DEFAULT_OUTPUT_DIR, ensure_directory, resolve_target, save_image
from himactl.progress.events import emit_event
from himactl.wallpaper import WallpaperSetter

log = logging.getLogger(__name__)


class Pipeline:
    def __init__(
        self,
        resolver: MetadataResolver,
        fetcher: TileFetcher,
        *,
        level: ResolutionLevel = ResolutionLevel.L8,
        margins: Margins | None = None,
        output_dir: Path = DEFAULT_OUTPUT_DIR,
        output_format: OutputFormat = OutputFormat.JPEG,
        store_latest_only: bool = False,
        force: bool = False,
        tile_width: int = TILE_WIDTH,
        num_workers: int | None = None,
        wallpaper_setter: WallpaperSetter | None = None,
    ):
        self.resolver = resolver
        self.fetcher = fetcher
        self.level = level
        self.margins = margins or Margins.empty()
        self.output_dir = Path(output_dir)
        self.output_format = output_format
        self.store_latest_only = store_latest_only
        self.force = force
        self.tile_width = tile_width
        self.num_workers = num_workers
        self.wallpaper_setter = wallpaper_setter

    @property
    def effective_workers(self) -> int:
        """Thread pool size, the executor default when no explicit count was given."""
        return self.num_workers or min(32, (os.cpu_count() or 1) + 4)

    def run(self) -> RunResult:
        """Execute the whole pipeline once.

        Returns:
            RunResult: what happened, including which tiles ended up missing

        Raises:
            MetadataError: when the latest timestamp cannot be resolved
            ClockError: when the cache buster cannot be computed
            PersistenceError: when the output directory or file cannot be written
        """
        timestamp = self.resolver.resolve_latest()
        target = resolve_target(
            timestamp,
            output_dir=self.output_dir,
            output_format=self.output_format,
            store_latest_only=self.store_latest_only,
            force=self.force,
        )
        if target.should_skip:
            log.info("%s already exists, skipping (use --force to download it again)", target.path)
            return RunResult(status=RunStatus.SKIPPED, target=target, timestamp=timestamp)

        ensure_directory(target.path.parent)
        results = self.fetch_all(timestamp)
        canvas = self.compose(results)
        save_image(canvas, target)

        result = RunResult(
            status=RunStatus.SAVED,
            target=target,
            timestamp=timestamp,
            fetched=sorted((r.coordinate for r in results if r.ok), key=_coordinate_key),
            missing=sorted((r.coordinate for r in results if not r.ok), key=_coordinate_key),
        )
        if result.missing:
            log.warning("%d of %d tiles are missing from %s", len(result.missing), len(results), target.path)
        if self.wallpaper_setter is not None:
            result.wallpaper_error = self._set_wallpaper(target)
        return result

    def fetch_all(self, timestamp: ImageTimestamp) -> list[TileResult]:
        """Fetch every tile of the grid concurrently.

        Each tile is independent, a failed tile is logged and recorded as a result
        without an image; sibling fetches always run to completion.
        """
        coordinates = plan(self.level)
        batch_id = str(uuid.uuid4())
        emit_event(
            ProgressEventType.BATCH_STARTED,
            task_id=batch_id,
            total_items=len(coordinates),
            description="tiles",
        )
        log.info("Fetching %d tiles for %s UTC", len(coordinates), timestamp)

        results: list[TileResult] = []
        workers = self.effective_workers
        self.fetcher.init(pool_maxsize=workers)
        try:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                future2coord = {
                    executor.submit(self.fetch_one, timestamp, coordinate): coordinate for coordinate in coordinates
                }
                for future in as_completed(future2coord):
                    results.append(future.result())
        finally:
            self.fetcher.close()

        success_count = sum(1 for r in results if r.ok)
        emit_event(
            ProgressEventType.BATCH_COMPLETED,
            task_id=batch_id,
            success_count=success_count,
            failure_count=len(results) - success_count,
        )
        return results

    def fetch_one(self, timestamp: ImageTimestamp, coordinate: TileCoordinate) -> TileResult:
        url = tile_url(
            self.resolver.base_url,
            self.level,
            self.tile_width,
            timestamp,
            coordinate.x,
            coordinate.y,
        )
        try:
            image = self.fetcher.fetch_tile(url, item_id=f"{coordinate.x}_{coordinate.y}")
        except TileFetchError as e:
            log.warning("Tile %s unavailable [%s]: %s", coordinate, e.reason.value, e.message)
            return TileResult(coordinate=coordinate, url=url, error=e)
        if image.size != (self.tile_width, self.tile_width):
            error = _size_mismatch(url, image, self.tile_width)
            log.warning("Tile %s unavailable [%s]: %s", coordinate, error.reason.value, error.message)
            return TileResult(coordinate=coordinate, url=url, error=error)
        return TileResult(coordinate=coordinate, url=url, image=image)

    def compose(self, results: list[TileResult]) -> Image.Image:
        compositor = Compositor(self.level, self.tile_width, self.margins)
        return compositor.compose(results)

    def _set_wallpaper(self, target: OutputTarget) -> str | None:
        try:
            self.wallpaper_setter.set_wallpaper(target.path)
        except PlatformError as e:
            log.error("Image saved to %s, but the wallpaper could not be set: %s", target.path, e)
            return str(e)
        return None


def _coordinate_key(coordinate: TileCoordinate) -> tuple[int, int]:
    return (coordinate.y, coordinate.x)


def _size_mismatch(url: str, image: Image.Image, tile_width: int) -> TileFetchError:
    return TileFetchError(
        FetchFailure.DECODE,
        url,
        f"unexpected tile size {image.width}x{image.height}, expected {tile_width}x{tile_width}",
    )
