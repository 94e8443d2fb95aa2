import logging
from collections.abc import Iterable

from PIL import Image

from himactl.grid import canvas_size, tile_offset
from himactl.model import Margins, ResolutionLevel, TileResult

log = logging.getLogger(__name__)

# fully transparent, holes and margins keep this value
BACKGROUND = (0, 0, 0, 0)


class Compositor:
    """Owns the output canvas and places decoded tiles onto it.

    Tiles never overlap, so the final image does not depend on the order in which
    tiles are placed. Tiles that failed to download are simply never placed and
    leave a transparent hole behind.
    """

    def __init__(self, level: ResolutionLevel, tile_width: int, margins: Margins | None = None) -> None:
        self.level = level
        self.tile_width = tile_width
        self.margins = margins or Margins.empty()

    @staticmethod
    def new(width: int, height: int) -> Image.Image:
        return Image.new("RGBA", (width, height), BACKGROUND)

    @staticmethod
    def place(canvas: Image.Image, block: Image.Image, offset_x: int, offset_y: int) -> None:
        """Copy ``block`` into ``canvas`` with its top-left corner at the given offset.

        Existing pixels are overwritten, alpha included.

        Raises:
            ValueError: when the block does not fit inside the canvas
        """
        if (
            offset_x < 0
            or offset_y < 0
            or offset_x + block.width > canvas.width
            or offset_y + block.height > canvas.height
        ):
            raise ValueError(
                f"Block {block.size} at ({offset_x}, {offset_y}) exceeds canvas {canvas.size}"
            )
        if block.mode != canvas.mode:
            block = block.convert(canvas.mode)
        canvas.paste(block, (offset_x, offset_y))

    def create_canvas(self) -> Image.Image:
        width, height = canvas_size(self.level, self.tile_width, self.margins)
        return self.new(width, height)

    def compose(self, results: Iterable[TileResult]) -> Image.Image:
        """Build the canvas from a set of tile results, skipping the failed ones.

        Args:
            results (Iterable[TileResult]): fetch outcomes, in any order

        Returns:
            Image.Image: RGBA canvas sized for the configured level and margins
        """
        canvas = self.create_canvas()
        placed = 0
        for result in results:
            if not result.ok:
                continue
            offset_x, offset_y = tile_offset(result.coordinate, self.tile_width, self.margins)
            self.place(canvas, result.image, offset_x, offset_y)
            placed += 1
        log.debug("Placed %d tiles on a %dx%d canvas", placed, canvas.width, canvas.height)
        return canvas
