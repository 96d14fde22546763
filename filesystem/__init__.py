"""Hierarchical file system over Google Drive.

Usage:
    from filesystem import build_registry

    registry = build_registry()
    fs = registry.create("gdrive", credentials_file="client_secret.json")
    fs.exclude_file_extension(".exe")
    fs.create_dir("Reports/2024")
    fs.upload("summary.pdf", "Reports/2024")
    fs.terminate()
"""

import functools
from typing import Optional

from .base import (
    FOLDER_MIME_TYPE,
    BatchResult,
    BatchTransferError,
    DuplicateExclusionError,
    FileMetadata,
    FileSystem,
    FileSystemError,
    InvalidFileNameError,
    InvalidPathError,
    RemoteNotFoundError,
    RemoteObject,
    ResolutionIncompleteError,
    SessionClosedError,
    TransportError,
    UnsupportedExtensionError,
    UnsupportedFileError,
)
from .content_types import DEFAULT_MIME_TYPES_FILE, ExtensionClassifier, MimeRule
from .drive import DEFAULT_DOWNLOAD_DIR, DriveFileSystem
from .exclusion import ExclusionFilter
from .gdrive import DEFAULT_TIMEOUT, GoogleDriveRemote
from .query import Query
from .registry import FileSystemRegistry
from .remote import RemoteDrive, SearchPage
from .resolver import ParentChain, PathResolver, VirtualPath
from .session import Session, SessionState


def create_drive_filesystem(credentials_file: str = "client_secret.json",
                            token_file: str = "token.json",
                            service_account_file: Optional[str] = None,
                            mime_types_file: Optional[str] = None,
                            download_dir: Optional[str] = None,
                            timeout: float = DEFAULT_TIMEOUT) -> DriveFileSystem:
    """Create a DriveFileSystem that connects to Google Drive on first use."""
    connect = functools.partial(
        GoogleDriveRemote.connect,
        credentials_file=credentials_file,
        token_file=token_file,
        service_account_file=service_account_file,
        timeout=timeout,
    )
    return DriveFileSystem(
        connect,
        mime_types_file=mime_types_file or DEFAULT_MIME_TYPES_FILE,
        download_dir=download_dir or DEFAULT_DOWNLOAD_DIR,
    )


def build_registry() -> FileSystemRegistry:
    """Registry with the built-in implementations."""
    registry = FileSystemRegistry()
    registry.register("gdrive", create_drive_filesystem)
    return registry


__all__ = [
    'FOLDER_MIME_TYPE',
    'BatchResult',
    'BatchTransferError',
    'DuplicateExclusionError',
    'FileMetadata',
    'FileSystem',
    'FileSystemError',
    'InvalidFileNameError',
    'InvalidPathError',
    'RemoteNotFoundError',
    'RemoteObject',
    'ResolutionIncompleteError',
    'SessionClosedError',
    'TransportError',
    'UnsupportedExtensionError',
    'UnsupportedFileError',
    'ExtensionClassifier',
    'MimeRule',
    'DriveFileSystem',
    'ExclusionFilter',
    'GoogleDriveRemote',
    'Query',
    'FileSystemRegistry',
    'RemoteDrive',
    'SearchPage',
    'ParentChain',
    'PathResolver',
    'VirtualPath',
    'Session',
    'SessionState',
    'create_drive_filesystem',
    'build_registry',
]
