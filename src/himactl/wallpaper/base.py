from abc import ABC, abstractmethod
from pathlib import Path


class WallpaperSetter(ABC):
    """
    Narrow capability to set the desktop wallpaper, one implementation per platform.
    """

    @abstractmethod
    def set_wallpaper(self, image_path: Path) -> None:
        """Use the given image as desktop wallpaper.

        Raises:
            PlatformError: when the platform refuses the change
        """
        ...
