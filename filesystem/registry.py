"""Registry of available file-system implementations.

The composition root builds one registry at start-up and owns it. Nothing
registers itself as a side effect of being imported.
"""

from typing import Callable, Dict, List

from .base import FileSystem

FileSystemFactory = Callable[..., FileSystem]


class FileSystemRegistry:
    """Maps implementation names (e.g. "gdrive") to factories."""

    def __init__(self) -> None:
        self._factories: Dict[str, FileSystemFactory] = {}

    def register(self, name: str, factory: FileSystemFactory) -> None:
        """Register a factory.

        Raises:
            ValueError: If the name is taken
        """
        if name in self._factories:
            raise ValueError(f"File system already registered: {name}")
        self._factories[name] = factory

    def create(self, name: str, **options) -> FileSystem:
        """Build a file system by name, passing ``options`` to its factory.

        Raises:
            KeyError: If no such implementation is registered
        """
        try:
            factory = self._factories[name]
        except KeyError:
            available = ", ".join(self.names()) or "none"
            raise KeyError(f"Unknown file system: {name} (available: {available})") from None
        return factory(**options)

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories
