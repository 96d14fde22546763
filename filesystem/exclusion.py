"""Extension exclusion filter."""

from typing import List, Tuple

from .base import DuplicateExclusionError, UnsupportedExtensionError, UnsupportedFileError
from .content_types import split_extension


def _normalize(extension: str) -> str:
    if not extension:
        raise ValueError("Extension must not be empty")
    return extension if extension.startswith(".") else f".{extension}"


class ExclusionFilter:
    """Set of extensions that may not be transferred.

    Extensions are compared exactly (``.PDF`` and ``.pdf`` differ). A
    missing leading dot is added, so ``exe`` and ``.exe`` are the same.
    """

    def __init__(self) -> None:
        self._excluded: List[str] = []

    @property
    def excluded(self) -> Tuple[str, ...]:
        return tuple(self._excluded)

    def exclude(self, extension: str) -> None:
        """Add an extension.

        Raises:
            DuplicateExclusionError: If it is already excluded
        """
        extension = _normalize(extension)
        if extension in self._excluded:
            raise DuplicateExclusionError(f"File extension: {extension}, already excluded")
        self._excluded.append(extension)

    def is_excluded(self, extension: str) -> bool:
        if not extension:
            return False
        return _normalize(extension) in self._excluded

    def check_allowed(self, path: str) -> None:
        """Raise unless ``path`` may be transferred.

        Raises:
            UnsupportedFileError: If the file has no extension
            UnsupportedExtensionError: If its extension is excluded
        """
        extension = split_extension(path)
        if extension is None:
            raise UnsupportedFileError(f"File path: {path}, not supported")
        if extension in self._excluded:
            raise UnsupportedExtensionError(f"File extension: {extension}, not supported")
