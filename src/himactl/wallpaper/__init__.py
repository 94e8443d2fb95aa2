"""Desktop wallpaper integration.

The pipeline only depends on the WallpaperSetter interface; the implementation is
picked by platform name:
- WindowsWallpaperSetter: registry + user32 calls (``win32``)
- UnsupportedWallpaperSetter: logs a warning and does nothing (everything else)
"""

import sys

from himactl.registry import Registry
from himactl.wallpaper.base import WallpaperSetter
from himactl.wallpaper.unsupported import UnsupportedWallpaperSetter
from himactl.wallpaper.windows import WindowsWallpaperSetter

registry = Registry[WallpaperSetter](name="wallpaper setter")
registry.register("win32", WindowsWallpaperSetter)


def create_wallpaper_setter(platform: str | None = None) -> WallpaperSetter:
    platform = platform or sys.platform
    if registry.is_registered(platform):
        return registry.create(platform)
    return UnsupportedWallpaperSetter()


__all__ = [
    "WallpaperSetter",
    "WindowsWallpaperSetter",
    "UnsupportedWallpaperSetter",
    "create_wallpaper_setter",
]
