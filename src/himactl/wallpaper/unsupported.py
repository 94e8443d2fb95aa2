import logging
from pathlib import Path

from himactl.wallpaper.base import WallpaperSetter

log = logging.getLogger(__name__)


class UnsupportedWallpaperSetter(WallpaperSetter):
    def set_wallpaper(self, image_path: Path) -> None:
        log.warning("Setting the wallpaper is not supported on this platform")
