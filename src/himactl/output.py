import logging
import os
import tempfile
from pathlib import Path

from PIL import Image

from himactl.errors import PersistenceError
from himactl.model import OUTPUT_PREFIX, ImageTimestamp, OutputFormat, OutputTarget

log = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("~/Pictures/Himawari").expanduser()
JPEG_QUALITY = 95


def output_filename(timestamp: ImageTimestamp, output_format: OutputFormat, store_latest_only: bool) -> str:
    if store_latest_only:
        return f"{OUTPUT_PREFIX}_latest.{output_format.extension}"
    return f"{OUTPUT_PREFIX}_{timestamp.compact_date}_{timestamp.time}.{output_format.extension}"


def resolve_target(
    timestamp: ImageTimestamp,
    output_dir: Path,
    output_format: OutputFormat,
    store_latest_only: bool = False,
    force: bool = False,
) -> OutputTarget:
    path = Path(output_dir).expanduser() / output_filename(timestamp, output_format, store_latest_only)
    return OutputTarget(
        path=path,
        format=output_format,
        store_latest_only=store_latest_only,
        force=force,
    )


def ensure_directory(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PersistenceError("output-dir", f"Cannot create output directory {directory}: {e}", e) from e


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def prepare_image(canvas: Image.Image, output_format: OutputFormat) -> Image.Image:
    """JPEG has no alpha channel, transparent regions are flattened onto black."""
    if output_format is OutputFormat.PNG:
        return canvas
    background = Image.new("RGBA", canvas.size, (0, 0, 0, 255))
    return Image.alpha_composite(background, canvas.convert("RGBA")).convert("RGB")


def save_image(canvas: Image.Image, target: OutputTarget) -> Path:
    """Write the canvas to the target path, all or nothing.

    The image is written to a temporary file next to the target and moved in place
    once complete, so an interrupted write never leaves a truncated output behind.

    Args:
        canvas (Image.Image): composed image
        target (OutputTarget): where and how to store it

    Returns:
        Path: the written path

    Raises:
        PersistenceError: when encoding or writing fails
    """
    directory = target.path.parent
    image = prepare_image(canvas, target.format)
    options = {"quality": JPEG_QUALITY} if target.format is OutputFormat.JPEG else {}

    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=directory,
            prefix=f".{target.path.stem}.",
            suffix=f".{target.format.extension}",
            delete=False,
        ) as handle:
            tmp_path = Path(handle.name)
            image.save(handle, format=target.format.pil_format, **options)
        # temporary files are created 0600, give the image the usual umask-based mode
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, target.path)
    except (OSError, ValueError) as e:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise PersistenceError("output-write", f"Cannot write {target.path}: {e}", e) from e

    log.info("Wrote %s (%dx%d)", target.path, image.width, image.height)
    return target.path
