"""Base classes for drivefs file systems.

Defines the error hierarchy, the data types shared by every layer, and the
abstract interface that file-system implementations provide.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence, Tuple

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


class FileSystemError(Exception):
    """Base exception for file-system operations."""
    pass


class SessionClosedError(FileSystemError):
    """Operation attempted after the file system was terminated."""
    pass


class UnsupportedFileError(FileSystemError):
    """File can't be transferred (e.g. it has no extension)."""
    pass


class UnsupportedExtensionError(UnsupportedFileError):
    """File extension has been excluded from transfers."""
    pass


class InvalidFileNameError(FileSystemError):
    """File name has no extension to classify."""
    pass


class DuplicateExclusionError(FileSystemError):
    """Extension is already excluded."""
    pass


class InvalidPathError(FileSystemError):
    """Virtual path can't be used for the requested operation."""
    pass


class RemoteNotFoundError(FileSystemError):
    """No remote object matched."""
    pass


class TransportError(FileSystemError):
    """The remote service failed or couldn't be reached."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class ResolutionIncompleteError(FileSystemError):
    """A folder on a path doesn't exist remotely.

    Attributes:
        folder: The folder path that was being resolved
        chain: The ParentChain resolved before the missing component
        missing: Name of the first component that wasn't found
    """

    def __init__(self, folder: Any, chain: Any) -> None:
        self.folder = folder
        self.chain = chain
        self.missing = folder.components[len(chain)]
        super().__init__(f"Folder not found: {self.missing} (resolving {folder})")


@dataclass
class RemoteObject:
    """An object in the remote store, as seen through search results.

    Attributes:
        id: Opaque remote identifier
        name: Object name (not a path)
        is_folder: True for folders
        mime_type: Remote MIME type, if it was requested
    """
    id: str
    name: str
    is_folder: bool = False
    mime_type: Optional[str] = None

    @classmethod
    def from_api(cls, item: Dict) -> "RemoteObject":
        """Build from a Drive API ``files`` resource dict."""
        mime_type = item.get("mimeType")
        return cls(
            id=item["id"],
            name=item.get("name", ""),
            is_folder=mime_type == FOLDER_MIME_TYPE,
            mime_type=mime_type,
        )


@dataclass
class FileMetadata:
    """Optional overrides for an upload.

    Attributes:
        name: Remote name (defaults to the local file name)
        description: Remote description
        mime_type: Explicit content type, skips classification
        extension: Stored in the object's app properties
        version: Stored in the object's app properties
    """
    name: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = None
    extension: Optional[str] = None
    version: Optional[str] = None


@dataclass
class BatchResult:
    """Outcome of a batch transfer, in processing order.

    An item listed twice in a batch is processed, and recorded, twice.

    Attributes:
        succeeded: (item, result) pairs; the result is a file ID or local paths
        failed: (item, exception) pairs
    """
    succeeded: List[Tuple[str, Any]] = field(default_factory=list)
    failed: List[Tuple[str, FileSystemError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def errors(self) -> List[FileSystemError]:
        return [error for _, error in self.failed]


def _common_error_type(errors: Sequence[FileSystemError]) -> type:
    """Most specific FileSystemError subclass shared by all ``errors``."""
    common = type(errors[0])
    for error in errors[1:]:
        while not isinstance(error, common):
            common = common.__mro__[1]
    if not issubclass(common, FileSystemError):
        return FileSystemError
    return common


@lru_cache(maxsize=None)
def _batch_error_class(item_error: type) -> type:
    return type(f"Batch{item_error.__name__}", (BatchTransferError, item_error), {})


class BatchTransferError(FileSystemError):
    """At least one item of a batch failed. Siblings were still processed.

    Build it with ``for_result``. The raised error is then also an instance
    of the failed items' common error type, so ``except
    UnsupportedExtensionError`` catches a batch whose only failures were
    excluded extensions.

    Attributes:
        operation: Name of the batch operation
        result: The BatchResult, including the items that worked
    """

    def __init__(self, operation: str, result: BatchResult) -> None:
        failed = ", ".join(item for item, _ in result.failed)
        FileSystemError.__init__(
            self,
            f"{operation}: {len(result.failed)} of "
            f"{len(result.failed) + len(result.succeeded)} items failed ({failed})"
        )
        self.operation = operation
        self.result = result

    @classmethod
    def for_result(cls, operation: str, result: BatchResult) -> "BatchTransferError":
        errors = result.errors()
        common = _common_error_type(errors)
        if common is FileSystemError or issubclass(common, BatchTransferError):
            return cls(operation, result)

        error = _batch_error_class(common)(operation, result)
        # Attributes of the item error type (missing, original_error, ...)
        for name, value in vars(errors[0]).items():
            error.__dict__.setdefault(name, value)
        return error


class FileSystem(ABC):
    """Abstract base class for hierarchical file systems.

    Implementations map slash-delimited virtual paths onto some backend.
    Every operation raises SessionClosedError once ``terminate()`` was
    called.
    """

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @abstractmethod
    def initialize(self) -> None:
        """Connect to the backend. No-op if already connected."""
        pass

    @abstractmethod
    def terminate(self) -> None:
        """Close the file system. It can't be used afterwards."""
        pass

    # =========================================================================
    # Filtering
    # =========================================================================

    @abstractmethod
    def exclude_file_extension(self, extension: str) -> None:
        """Refuse transfers of files with this extension.

        Raises:
            DuplicateExclusionError: If the extension is already excluded
        """
        pass

    # =========================================================================
    # Transfers
    # =========================================================================

    @abstractmethod
    def upload(self, file_path: str, destination_path: str = "",
               metadata: Optional[FileMetadata] = None) -> str:
        """Upload a local file.

        The folders above the last component of ``destination_path`` must
        exist and the object is created in the innermost one. The last
        component is the leaf being uploaded and is never looked up; the
        remote name is the local file name (or ``metadata.name``).

        Args:
            file_path: Path to the local file
            destination_path: Remote path of the new object, e.g.
                "Reports/q1.txt". "" or a bare name means the top level
            metadata: Optional overrides for the remote object

        Returns:
            ID of the created remote object
        """
        pass

    @abstractmethod
    def upload_collection(self, file_paths: Sequence[str],
                          destination_path: str = "") -> BatchResult:
        """Upload several files under the folder part of ``destination_path``.

        Raises:
            BatchTransferError: If any file failed; the others are still uploaded
        """
        pass

    @abstractmethod
    def download(self, path: str) -> List[str]:
        """Download every remote file named like the last path component.

        Returns:
            Local paths written, one per remote match
        """
        pass

    @abstractmethod
    def download_multiple(self, paths: Sequence[str]) -> BatchResult:
        """Download several paths independently.

        Raises:
            BatchTransferError: If any path failed; the others still download
        """
        pass

    @abstractmethod
    def create_dir(self, path: str) -> str:
        """Create a folder. Returns its ID."""
        pass

    # =========================================================================
    # Search
    # =========================================================================

    @abstractmethod
    def find_file_by_name(self, name: str) -> List[RemoteObject]:
        pass

    @abstractmethod
    def find_file_by_extension(self, extension: str) -> List[RemoteObject]:
        pass

    @abstractmethod
    def find_directory(self, name: str) -> List[RemoteObject]:
        pass
