"""Generic registry pattern for pluggable implementations.

himactl uses it to pick progress reporters by name and wallpaper setters by
platform.

Example:
    >>> from himactl.registry import Registry
    >>> from himactl.wallpaper import WallpaperSetter
    >>>
    >>> setters = Registry[WallpaperSetter]("wallpaper setter")
    >>> setters.register("win32", WindowsWallpaperSetter)
    >>> setter = setters.create("win32")
"""

from typing import Generic, TypeVar

T = TypeVar("T")


class Registry(Generic[T]):
    """Registry for managing specific class implementations."""

    def __init__(self, name: str):
        self.registry_name = name
        self._items: dict[str, type[T]] = {}

    def get(self, name: str) -> type[T] | None:
        return self._items.get(name)

    def register(self, name: str, item_class: type[T]):
        self._items[name] = item_class

    def create(self, name: str, **kwargs) -> T:
        if name not in self._items:
            raise ValueError(
                f"{self.registry_name.capitalize()} '{name}' not found. "
                f"Specify one of the following: ({self.list()})."
            )
        return self._items[name](**kwargs)

    def list(self) -> list[str]:
        return list(self._items.keys())

    def is_registered(self, name: str) -> bool:
        return name in self._items
