from abc import ABC, abstractmethod
from typing import Any

from PIL import Image


class TileFetcher(ABC):
    """Abstract base class for tile fetchers."""

    @abstractmethod
    def init(self, **kwargs: Any) -> None:
        """Prepare the fetcher (connections, sessions) before a batch of tiles.

        Args:
            **kwargs (Any): Additional keyword arguments for initialization
        """
        ...

    @abstractmethod
    def fetch_tile(self, url: str, item_id: str | None = None) -> Image.Image:
        """Download and decode a single tile.

        Args:
            url (str): tile URL
            item_id (str | None): identifier for progress tracking, defaults to the URL

        Returns:
            Image.Image: decoded tile

        Raises:
            TileFetchError: on transport failure, non-success status or undecodable content
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close fetcher and release resources."""
        ...
