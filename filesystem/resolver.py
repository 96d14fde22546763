"""Virtual path to remote folder ID resolution.

The remote store has no real paths, only objects that point at their parent
folders by ID. Resolving ``a/b/c.txt`` means finding folder ``a``, then a
folder ``b`` inside it, one search per component. The leaf (``c.txt``) is
what is about to be created, so it's never looked up.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from .base import RemoteObject, ResolutionIncompleteError
from .query import ROOT_FOLDER_ID, Query
from .remote import RemoteDrive

logger = logging.getLogger(__name__)

SEPARATOR = "/"


@dataclass(frozen=True)
class VirtualPath:
    """Slash-delimited path made of non-empty components.

    Attributes:
        components: Names from outermost to innermost
        rooted: True if the path started with a separator
    """
    components: Tuple[str, ...] = ()
    rooted: bool = False

    @classmethod
    def parse(cls, path: str) -> "VirtualPath":
        parts = tuple(p for p in path.split(SEPARATOR) if p)
        return cls(parts, path.startswith(SEPARATOR))

    @property
    def name(self) -> str:
        """Final component, or "" for the top level."""
        return self.components[-1] if self.components else ""

    @property
    def parent(self) -> "VirtualPath":
        return VirtualPath(self.components[:-1], self.rooted)

    def child(self, name: str) -> "VirtualPath":
        return VirtualPath(self.components + (name,), self.rooted)

    def __str__(self) -> str:
        joined = SEPARATOR.join(self.components)
        return f"{SEPARATOR}{joined}" if self.rooted else joined


@dataclass(frozen=True)
class ParentChain:
    """Folder IDs resolved for a path's directory components.

    Attributes:
        ids: One ID per resolved component, outermost first
        depth: Number of directory components that were requested
    """
    ids: Tuple[str, ...] = ()
    depth: int = 0

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)

    @property
    def complete(self) -> bool:
        return len(self.ids) == self.depth

    @property
    def parent_id(self) -> Optional[str]:
        """Innermost resolved folder, None for the top level."""
        return self.ids[-1] if self.ids else None

    def parents(self) -> List[str]:
        """Value for a new object's ``parents`` field."""
        return [self.ids[-1]] if self.ids else []


class PathResolver:
    """Turns virtual paths into ParentChains by searching the remote store.

    Each directory component is searched by exact name inside the folder
    resolved for the previous component. When several objects share a
    name, the first one returned wins.
    """

    def __init__(self, remote: RemoteDrive, folders_only: bool = True) -> None:
        """
        Args:
            remote: Store to search
            folders_only: Only folders can match a directory component
        """
        self.remote = remote
        self.folders_only = folders_only

    def resolve(self, path: Union[str, VirtualPath], strict: bool = False) -> ParentChain:
        """Resolve the directories above ``path``'s final component.

        Stops at the first component that can't be found and returns what
        was resolved up to there. A string ending in a separator
        ("Reports/") has no final component, so every component is a folder.

        Args:
            path: Path of the object about to be created
            strict: Raise instead of returning an incomplete chain

        Raises:
            ResolutionIncompleteError: If strict and a component is missing
            TransportError: If a search fails
        """
        if isinstance(path, str):
            if path.endswith(SEPARATOR):
                return self.resolve_folder(path, strict=strict)
            path = VirtualPath.parse(path)
        return self.resolve_folder(path.parent, strict=strict)

    def resolve_folder(self, folder: Union[str, VirtualPath],
                       strict: bool = False) -> ParentChain:
        """Resolve every component of ``folder``.

        The first component of a rooted path must sit in the top level; a
        relative path's first component may be anywhere.
        """
        if isinstance(folder, str):
            folder = VirtualPath.parse(folder)

        parent_id = ROOT_FOLDER_ID if folder.rooted else None
        ids: List[str] = []

        for name in folder.components:
            found = self._first_match(name, parent_id)
            if found is None:
                logger.debug("Folder %r not found under %s", name, parent_id or "any folder")
                break
            logger.debug("Resolved %r -> %s", name, found.id)
            ids.append(found.id)
            parent_id = found.id

        chain = ParentChain(tuple(ids), len(folder.components))
        if strict and not chain.complete:
            raise ResolutionIncompleteError(folder, chain)
        return chain

    def _first_match(self, name: str, parent_id: Optional[str]) -> Optional[RemoteObject]:
        query = Query(
            name=name,
            parent_id=parent_id,
            folders=True if self.folders_only else None,
        )
        for page in self.remote.iter_pages(query, fields="id, name"):
            if page.items:
                return page.items[0]
        return None
