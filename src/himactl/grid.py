"""Tile grid planning: which tiles make up a full-disk image, where they come from
and where they go on the output canvas.

Tiles of a level ``L`` image form an ``L x L`` grid of fixed-size squares. Tile
``(x, y)`` lands at ``(margins.left + x * width, margins.top + y * width)``, so two
distinct coordinates never share a pixel of the canvas.
"""

from himactl.model import ImageTimestamp, Margins, ResolutionLevel, TileCoordinate


def plan(level: ResolutionLevel) -> list[TileCoordinate]:
    """Produce every coordinate of a ``level x level`` grid, row by row.

    Args:
        level (ResolutionLevel): grid resolution

    Returns:
        list[TileCoordinate]: ``level * level`` unique coordinates
    """
    size = int(level)
    return [TileCoordinate(x=x, y=y) for y in range(size) for x in range(size)]


def tile_url(
    base: str,
    level: ResolutionLevel,
    tile_width: int,
    timestamp: ImageTimestamp,
    x: int,
    y: int,
) -> str:
    base = base.rstrip("/")
    return (
        f"{base}/{int(level)}d/{tile_width}/"
        f"{timestamp.year}/{timestamp.month}/{timestamp.day}/"
        f"{timestamp.time}_{x}_{y}.png"
    )


def tile_offset(coordinate: TileCoordinate, tile_width: int, margins: Margins) -> tuple[int, int]:
    return (
        margins.left + coordinate.x * tile_width,
        margins.top + coordinate.y * tile_width,
    )


def canvas_size(level: ResolutionLevel, tile_width: int, margins: Margins) -> tuple[int, int]:
    grid = int(level) * tile_width
    return (
        margins.left + grid + margins.right,
        margins.top + grid + margins.bottom,
    )
