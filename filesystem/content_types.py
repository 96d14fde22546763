"""Extension to content-type classification.

Rules come from a table file with one ``extension#content/type`` record per
line, e.g. ``.png#image/png``. The first rule whose extension equals the
file's extension wins.
"""

import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .base import FileSystemError, InvalidFileNameError

MIME_TYPES_DELIMITER = "#"

DEFAULT_MIME_TYPES_FILE = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "data", "mime_types.txt"
)


def split_extension(path: str) -> Optional[str]:
    """Return the extension of a path's base name, dot included.

    ``"a/b.tar.gz"`` gives ``".gz"``; a name without a dot gives None.
    """
    name = os.path.basename(path)
    index = name.rfind(".")
    if index == -1:
        return None
    return name[index:]


@dataclass(frozen=True)
class MimeRule:
    extension: str
    content_type: str


def parse_rules(lines: Iterable[str],
                delimiter: str = MIME_TYPES_DELIMITER) -> List[MimeRule]:
    """Parse rule table lines. Blank lines are skipped.

    Raises:
        FileSystemError: If a line isn't ``extension<delimiter>content_type``
    """
    rules = []
    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        extension, sep, content_type = line.partition(delimiter)
        extension = extension.strip()
        content_type = content_type.strip()
        if not sep or not extension or not content_type:
            raise FileSystemError(f"Malformed MIME rule on line {line_number}: {line!r}")
        rules.append(MimeRule(extension, content_type))
    return rules


class ExtensionClassifier:
    """Maps file names to content types using an ordered rule table."""

    def __init__(self, rules: Sequence[MimeRule]) -> None:
        self._rules = tuple(rules)

    @classmethod
    def from_file(cls, path: str = DEFAULT_MIME_TYPES_FILE,
                  delimiter: str = MIME_TYPES_DELIMITER) -> "ExtensionClassifier":
        """Load the rule table from a file.

        Raises:
            FileSystemError: If the file can't be read or is malformed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                return cls(parse_rules(f, delimiter))
        except OSError as e:
            raise FileSystemError(f"Failed to load MIME types from {path}: {e}") from e

    @property
    def rules(self) -> tuple:
        return self._rules

    def classify(self, file_name: str) -> Optional[str]:
        """Content type for ``file_name``, or None if no rule matches.

        Raises:
            InvalidFileNameError: If the name has no extension
        """
        extension = split_extension(file_name)
        if extension is None:
            raise InvalidFileNameError(f"File name has no extension: {file_name}")

        for rule in self._rules:
            if rule.extension == extension:
                return rule.content_type
        return None
