"""Path-based file system over a flat remote store.

DriveFileSystem exposes upload, download, create-directory and search on
slash-delimited paths. Paths are turned into folder IDs by PathResolver,
content types come from the session's ExtensionClassifier, and every
transfer is gated by an ExclusionFilter.
"""

import logging
import os
import tempfile
from typing import Callable, Dict, List, Optional, Sequence

from .base import (
    FOLDER_MIME_TYPE,
    BatchResult,
    BatchTransferError,
    FileMetadata,
    FileSystem,
    FileSystemError,
    InvalidPathError,
    RemoteNotFoundError,
    RemoteObject,
    TransportError,
    UnsupportedExtensionError,
)
from .content_types import DEFAULT_MIME_TYPES_FILE, split_extension
from .exclusion import ExclusionFilter
from .query import Query, by_extension, by_name, directory_named
from .remote import RemoteDrive
from .resolver import ParentChain, PathResolver, VirtualPath
from .session import Session

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_DIR = os.path.join(os.path.expanduser("~"), "Downloads")


class DriveFileSystem(FileSystem):
    """File system backed by a RemoteDrive.

    The connection is opened lazily by the first operation that needs it.
    Once ``terminate()`` is called every operation raises
    SessionClosedError before touching the network.
    """

    def __init__(self, connect: Callable[[], RemoteDrive],
                 mime_types_file: str = DEFAULT_MIME_TYPES_FILE,
                 download_dir: str = DEFAULT_DOWNLOAD_DIR,
                 folders_only: bool = True) -> None:
        """
        Args:
            connect: Returns a connected RemoteDrive
            mime_types_file: MIME rule table loaded on initialize
            download_dir: Local directory downloads are written to
            folders_only: Only folders match directory components of a path
        """
        self.session = Session(connect, mime_types_file)
        self.exclusions = ExclusionFilter()
        self.download_dir = download_dir
        self.folders_only = folders_only

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def initialize(self) -> None:
        self.session.initialize()

    def terminate(self) -> None:
        self.session.terminate()

    def _resolver(self, remote: RemoteDrive) -> PathResolver:
        return PathResolver(remote, folders_only=self.folders_only)

    # =========================================================================
    # Filtering
    # =========================================================================

    def exclude_file_extension(self, extension: str) -> None:
        self.session.check_open()
        self.exclusions.exclude(extension)

    def _validate_upload(self, file_path: str) -> None:
        self.exclusions.check_allowed(file_path)
        if not os.path.isfile(file_path):
            raise FileSystemError(f"File does not exist: {file_path}")

    # =========================================================================
    # Uploads
    # =========================================================================

    def upload(self, file_path: str, destination_path: str = "",
               metadata: Optional[FileMetadata] = None) -> str:
        self.session.check_open()
        self._validate_upload(file_path)

        remote = self.session.ensure_active()
        chain = self._resolver(remote).resolve(destination_path, strict=True)
        return self._upload_worker(remote, file_path, chain, metadata)

    def upload_collection(self, file_paths: Sequence[str],
                          destination_path: str = "") -> BatchResult:
        self.session.check_open()
        result = BatchResult()

        # Validate everything before the first upload
        valid = []
        for file_path in file_paths:
            try:
                self._validate_upload(file_path)
                valid.append(file_path)
            except FileSystemError as e:
                logger.warning("Skipping %s: %s", file_path, e)
                result.failed.append((file_path, e))

        if valid:
            try:
                remote = self.session.ensure_active()
                chain = self._resolver(remote).resolve(destination_path, strict=True)
            except FileSystemError as e:
                logger.error("Can't upload to %s: %s", destination_path or "top level", e)
                result.failed.extend((file_path, e) for file_path in valid)
                valid = []

            for file_path in valid:
                try:
                    file_id = self._upload_worker(remote, file_path, chain, None)
                    result.succeeded.append((file_path, file_id))
                except FileSystemError as e:
                    logger.warning("Failed to upload %s: %s", file_path, e)
                    result.failed.append((file_path, e))

        if result.failed:
            raise BatchTransferError.for_result("upload_collection", result)
        return result

    def _upload_worker(self, remote: RemoteDrive, file_path: str,
                       chain: ParentChain, metadata: Optional[FileMetadata]) -> str:
        metadata = metadata or FileMetadata()
        body: Dict = {"name": metadata.name or os.path.basename(file_path)}

        if chain:
            body["parents"] = chain.parents()
        if metadata.description is not None:
            body["description"] = metadata.description
        if metadata.mime_type is not None:
            body["mimeType"] = metadata.mime_type

        # fileExtension and version are read-only on Drive
        app_properties = {}
        if metadata.extension is not None:
            app_properties["extension"] = metadata.extension
        if metadata.version is not None:
            app_properties["version"] = str(metadata.version)
        if app_properties:
            body["appProperties"] = app_properties

        content_type = metadata.mime_type or self.session.classifier.classify(file_path)

        file_id = remote.create_object(body, content_path=file_path, content_type=content_type)
        logger.info("Uploaded %s as %s (%s)", file_path, body["name"], file_id)
        return file_id

    # =========================================================================
    # Downloads
    # =========================================================================

    def download(self, path: str) -> List[str]:
        self.session.check_open()

        name = VirtualPath.parse(path).name
        if not name:
            raise InvalidPathError(f"Nothing to download: {path!r}")
        extension = split_extension(name)
        if extension is not None and self.exclusions.is_excluded(extension):
            raise UnsupportedExtensionError(f"File extension: {extension}, not supported")

        remote = self.session.ensure_active()
        matches = self._search_all(remote, Query(name=name, folders=False))
        if not matches:
            raise RemoteNotFoundError(f"File not found: {name}")

        try:
            os.makedirs(self.download_dir, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"Can't create download directory {self.download_dir}: {e}") from e

        # Files sharing a name all land on the same local path; the last
        # one in search order wins.
        destination = os.path.join(self.download_dir, name)
        written = []
        for item in matches:
            self._download_file(remote, item, destination)
            written.append(destination)
        return written

    def download_multiple(self, paths: Sequence[str]) -> BatchResult:
        self.session.check_open()
        result = BatchResult()

        for path in paths:
            try:
                result.succeeded.append((path, self.download(path)))
            except FileSystemError as e:
                logger.warning("Failed to download %s: %s", path, e)
                result.failed.append((path, e))

        if result.failed:
            raise BatchTransferError.for_result("download_multiple", result)
        return result

    def _download_file(self, remote: RemoteDrive, item: RemoteObject,
                       destination: str) -> None:
        """Stream one object to ``destination`` via a temp file."""
        try:
            temp_fd, temp_path = tempfile.mkstemp(
                dir=os.path.dirname(destination), suffix=".part"
            )
        except OSError as e:
            raise FileSystemError(f"Can't write to {destination}: {e}") from e

        try:
            with os.fdopen(temp_fd, "wb") as f:
                remote.get_content(item.id, f)
            os.replace(temp_path, destination)
        except OSError as e:
            os.remove(temp_path)
            raise FileSystemError(f"Failed to write {destination}: {e}") from e
        except Exception:
            os.remove(temp_path)
            raise

        logger.info("Downloaded %s (%s) to %s", item.name, item.id, destination)

    # =========================================================================
    # Directories
    # =========================================================================

    def create_dir(self, path: str) -> str:
        self.session.check_open()

        virtual_path = VirtualPath.parse(path)
        if not virtual_path.name:
            raise InvalidPathError(f"Can't create a folder without a name: {path!r}")

        remote = self.session.ensure_active()
        chain = self._resolver(remote).resolve(virtual_path, strict=True)

        body: Dict = {"name": virtual_path.name, "mimeType": FOLDER_MIME_TYPE}
        if chain:
            body["parents"] = chain.parents()

        folder_id = remote.create_object(body)
        logger.info("Created folder %s (%s)", virtual_path, folder_id)
        return folder_id

    # =========================================================================
    # Search
    # =========================================================================

    def find_file_by_name(self, name: str) -> List[RemoteObject]:
        self.session.check_open()
        return self._find(by_name(name))

    def find_file_by_extension(self, extension: str) -> List[RemoteObject]:
        self.session.check_open()
        return self._find(by_extension(extension))

    def find_directory(self, name: str) -> List[RemoteObject]:
        self.session.check_open()
        return self._find(directory_named(name))

    def _find(self, query: Query) -> List[RemoteObject]:
        """Drain every page. A failing first page gives an empty result."""
        remote = self.session.ensure_active()
        pages = remote.iter_pages(query)
        try:
            first = next(pages)
        except TransportError as e:
            logger.error("Search failed (%s): %s", query, e)
            return []

        results = list(first.items)
        for page in pages:
            results.extend(page.items)
        return results

    @staticmethod
    def _search_all(remote: RemoteDrive, query: Query) -> List[RemoteObject]:
        results = []
        for page in remote.iter_pages(query):
            results.extend(page.items)
        return results
