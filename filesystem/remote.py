"""Remote capability used by the file system core.

The core never talks to a cloud API directly. It goes through a RemoteDrive,
which exposes just enough to search, create and read objects.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Iterator, List, Optional

from .base import RemoteObject
from .query import Query

DEFAULT_FIELDS = "id, name, mimeType"


@dataclass
class SearchPage:
    """One page of search results."""
    items: List[RemoteObject] = field(default_factory=list)
    next_page_token: Optional[str] = None


class RemoteDrive(ABC):
    """A flat, query-only object store addressed by opaque IDs."""

    @abstractmethod
    def search(self, query: Query, fields: str = DEFAULT_FIELDS,
               page_token: Optional[str] = None) -> SearchPage:
        """Fetch one page of objects matching ``query``.

        Args:
            query: Search filter
            fields: Comma-separated object fields to return
            page_token: Continuation token from the previous page

        Raises:
            TransportError: If the request fails
        """
        pass

    @abstractmethod
    def create_object(self, metadata: Dict, content_path: Optional[str] = None,
                      content_type: Optional[str] = None) -> str:
        """Create an object and return its ID.

        Args:
            metadata: Object metadata (name, parents, mimeType, ...)
            content_path: Local file to upload as the object's content
            content_type: Content type of the upload, None to let the
                remote infer it

        Raises:
            TransportError: If the request fails
        """
        pass

    @abstractmethod
    def get_content(self, file_id: str, destination: BinaryIO) -> None:
        """Stream an object's content into a binary file object.

        Raises:
            TransportError: If the request fails
        """
        pass

    def iter_pages(self, query: Query,
                   fields: str = DEFAULT_FIELDS) -> Iterator[SearchPage]:
        """Lazily yield result pages, following continuation tokens.

        Each page is fetched only when the consumer asks for it, so
        stopping early costs nothing. Calling again starts over.
        """
        page_token = None
        while True:
            page = self.search(query, fields=fields, page_token=page_token)
            yield page
            page_token = page.next_page_token
            if not page_token:
                break
