import logging
from pathlib import Path

from himactl.errors import PlatformError
from himactl.wallpaper.base import WallpaperSetter

log = logging.getLogger(__name__)

SPI_SETDESKWALLPAPER = 0x0014
SPIF_UPDATEINIFILE = 0x01
SPIF_SENDCHANGE = 0x02
COLOR_BACKGROUND = 1

# registry values controlling how the wallpaper is laid out, "6" fits the image on screen
DESKTOP_VALUES = {
    "WallpaperStyle": "6",
    "TileWallpaper": "0",
}


class WindowsWallpaperSetter(WallpaperSetter):
    """Sets the wallpaper through the registry and the user32 API, over a black background."""

    def set_wallpaper(self, image_path: Path) -> None:
        image_path = Path(image_path).resolve()
        try:
            self._write_registry(image_path)
            self._apply(image_path)
        except (OSError, AttributeError, ImportError) as e:
            raise PlatformError("wallpaper", f"Cannot set wallpaper to {image_path}: {e}", e) from e

    def _write_registry(self, image_path: Path) -> None:
        import winreg

        log.info("Setting Windows desktop wallpaper registry keys")
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, r"Control Panel\Colors", 0, winreg.KEY_WRITE) as key:
            winreg.SetValueEx(key, "Background", 0, winreg.REG_SZ, "0 0 0")
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, r"Control Panel\Desktop", 0, winreg.KEY_WRITE) as key:
            winreg.SetValueEx(key, "Wallpaper", 0, winreg.REG_SZ, str(image_path))
            for name, value in DESKTOP_VALUES.items():
                winreg.SetValueEx(key, name, 0, winreg.REG_SZ, value)

    def _apply(self, image_path: Path) -> None:
        import ctypes

        log.info("Setting Windows desktop wallpaper")
        user32 = ctypes.windll.user32
        elements = (ctypes.c_int * 1)(COLOR_BACKGROUND)
        colors = (ctypes.c_ulong * 1)(0)
        if not user32.SetSysColors(1, elements, colors):
            raise ctypes.WinError()
        if not user32.SystemParametersInfoW(
            SPI_SETDESKWALLPAPER,
            0,
            str(image_path),
            SPIF_UPDATEINIFILE | SPIF_SENDCHANGE,
        ):
            raise ctypes.WinError()
