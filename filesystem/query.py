"""Search filters for the remote store.

A Query is a structured filter. Google Drive receives it rendered in its
query language via ``str(query)``; other backends can read the fields.
"""

from dataclasses import dataclass
from typing import List, Optional

from .base import FOLDER_MIME_TYPE

ROOT_FOLDER_ID = "root"


def escape_query_value(value: str) -> str:
    """Escape a value for use in Google Drive API query strings."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


@dataclass(frozen=True)
class Query:
    """Structured search filter.

    Attributes:
        name: Exact name match
        name_contains: Substring match on the name
        parent_id: Only direct children of this folder
        folders: True for folders only, False for files only, None for both
        trashed: Match trashed objects instead of live ones
    """
    name: Optional[str] = None
    name_contains: Optional[str] = None
    parent_id: Optional[str] = None
    folders: Optional[bool] = None
    trashed: bool = False

    def __str__(self) -> str:
        clauses: List[str] = []
        if self.name is not None:
            clauses.append(f"name = '{escape_query_value(self.name)}'")
        if self.name_contains is not None:
            clauses.append(f"name contains '{escape_query_value(self.name_contains)}'")
        if self.parent_id is not None:
            clauses.append(f"'{escape_query_value(self.parent_id)}' in parents")
        if self.folders is True:
            clauses.append(f"mimeType = '{FOLDER_MIME_TYPE}'")
        elif self.folders is False:
            clauses.append(f"mimeType != '{FOLDER_MIME_TYPE}'")
        clauses.append(f"trashed = {'true' if self.trashed else 'false'}")
        return " and ".join(clauses)


def by_name(name: str) -> Query:
    return Query(name=name)


def by_extension(extension: str) -> Query:
    # Drive has no extension operator; "contains" is the closest match
    return Query(name_contains=extension)


def directory_named(name: str) -> Query:
    return Query(name=name, folders=True)
