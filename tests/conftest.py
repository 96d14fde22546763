"""Shared fixtures: an in-memory remote store and file systems built on it."""

import os
import shutil
import tempfile
from typing import BinaryIO, Dict, List, Optional

import pytest

from filesystem import DriveFileSystem, TransportError
from filesystem.base import FOLDER_MIME_TYPE, RemoteObject
from filesystem.query import ROOT_FOLDER_ID, Query
from filesystem.remote import DEFAULT_FIELDS, RemoteDrive, SearchPage


class FakeRemote(RemoteDrive):
    """In-memory RemoteDrive.

    Objects are returned in insertion order. ``page_size`` controls
    pagination; page tokens are the offset of the next page. Every call is
    recorded in ``calls``.
    """

    def __init__(self, page_size: int = 2) -> None:
        self.page_size = page_size
        self.objects: Dict[str, Dict] = {}
        self.calls: List[tuple] = []
        self.created: List[Dict] = []
        self.failing_pages = set()
        self.failing_creates = set()
        self.failing_downloads = set()
        self._next_id = 0

    # -- setup helpers -------------------------------------------------------

    def _add(self, name: str, mime_type: Optional[str], parents: Optional[List[str]],
             content: Optional[bytes]) -> str:
        self._next_id += 1
        object_id = f"id{self._next_id}"
        self.objects[object_id] = {
            'name': name,
            'mimeType': mime_type,
            'parents': list(parents or []),
            'content': content,
        }
        return object_id

    def add_folder(self, name: str, parent: Optional[str] = None) -> str:
        return self._add(name, FOLDER_MIME_TYPE, [parent] if parent else [], None)

    def add_file(self, name: str, content: bytes = b"", parent: Optional[str] = None) -> str:
        return self._add(name, "text/plain", [parent] if parent else [], content)

    def searches(self) -> List[tuple]:
        return [c for c in self.calls if c[0] == 'search']

    # -- RemoteDrive ---------------------------------------------------------

    def _matches(self, query: Query, obj: Dict) -> bool:
        is_folder = obj['mimeType'] == FOLDER_MIME_TYPE
        if query.name is not None and obj['name'] != query.name:
            return False
        if query.name_contains is not None and query.name_contains not in obj['name']:
            return False
        if query.parent_id is not None:
            parents = obj['parents'] or [ROOT_FOLDER_ID]
            if query.parent_id not in parents:
                return False
        if query.folders is True and not is_folder:
            return False
        if query.folders is False and is_folder:
            return False
        return True

    def search(self, query: Query, fields: str = DEFAULT_FIELDS,
               page_token: Optional[str] = None) -> SearchPage:
        self.calls.append(('search', str(query), page_token))
        start = int(page_token or 0)
        if start // self.page_size in self.failing_pages:
            raise TransportError(f"search failed at page {start // self.page_size}")

        matches = [
            RemoteObject(object_id, obj['name'], obj['mimeType'] == FOLDER_MIME_TYPE, obj['mimeType'])
            for object_id, obj in self.objects.items()
            if self._matches(query, obj)
        ]
        end = start + self.page_size
        next_token = str(end) if end < len(matches) else None
        return SearchPage(matches[start:end], next_token)

    def create_object(self, metadata: Dict, content_path: Optional[str] = None,
                      content_type: Optional[str] = None) -> str:
        self.calls.append(('create', metadata.get('name')))
        if metadata.get('name') in self.failing_creates:
            raise TransportError(f"create failed for {metadata.get('name')}")

        content = None
        if content_path is not None:
            with open(content_path, 'rb') as f:
                content = f.read()
        object_id = self._add(metadata['name'], metadata.get('mimeType'),
                              metadata.get('parents'), content)
        self.created.append({
            'id': object_id,
            'metadata': metadata,
            'content_type': content_type,
            'content': content,
        })
        return object_id

    def get_content(self, file_id: str, destination: BinaryIO) -> None:
        self.calls.append(('get_content', file_id))
        if file_id in self.failing_downloads:
            destination.write(b"partial")
            raise TransportError(f"download failed for {file_id}")
        destination.write(self.objects[file_id]['content'] or b"")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    dir_path = tempfile.mkdtemp(prefix="drivefs_test_")
    yield dir_path
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def download_dir(temp_dir):
    return os.path.join(temp_dir, "Downloads")


@pytest.fixture
def fs(remote, download_dir):
    """DriveFileSystem over the fake remote with the bundled MIME table."""
    return DriveFileSystem(lambda: remote, download_dir=download_dir)


@pytest.fixture
def make_file(temp_dir):
    """Write a local file and return its path."""
    def _make_file(name: str, content: str = "content") -> str:
        path = os.path.join(temp_dir, "local", name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(content)
        return path
    return _make_file
