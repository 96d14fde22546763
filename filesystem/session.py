"""Connection lifecycle for a file system instance."""

import logging
from enum import Enum
from typing import Callable, Optional

from .base import FileSystemError, SessionClosedError, TransportError
from .content_types import DEFAULT_MIME_TYPES_FILE, ExtensionClassifier
from .remote import RemoteDrive

logger = logging.getLogger(__name__)


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    TERMINATED = "terminated"


class Session:
    """Owns the remote handle and the MIME rule table.

    Goes UNINITIALIZED -> ACTIVE -> TERMINATED and never back. Not safe to
    drive from several threads at once.
    """

    def __init__(self, connect: Callable[[], RemoteDrive],
                 mime_types_file: str = DEFAULT_MIME_TYPES_FILE) -> None:
        """
        Args:
            connect: Returns a connected RemoteDrive
            mime_types_file: Rule table loaded on initialize
        """
        self._connect = connect
        self.mime_types_file = mime_types_file
        self.state = SessionState.UNINITIALIZED
        self._remote: Optional[RemoteDrive] = None
        self._classifier: Optional[ExtensionClassifier] = None

    @property
    def remote(self) -> Optional[RemoteDrive]:
        return self._remote

    @property
    def classifier(self) -> Optional[ExtensionClassifier]:
        return self._classifier

    def initialize(self) -> None:
        """Load the rule table and connect. No-op if already active.

        Raises:
            SessionClosedError: If the session was terminated
            FileSystemError: If the rule table can't be loaded
            TransportError: If connecting fails
        """
        self.check_open()
        if self.state is SessionState.ACTIVE:
            return

        classifier = ExtensionClassifier.from_file(self.mime_types_file)
        try:
            remote = self._connect()
        except FileSystemError:
            raise
        except Exception as e:
            raise TransportError(f"Failed to connect: {e}", e) from e

        self._classifier = classifier
        self._remote = remote
        self.state = SessionState.ACTIVE
        logger.info("Session initialized (%d MIME rules)", len(classifier.rules))

    def terminate(self) -> None:
        """Close the session. No-op unless active."""
        if self.state is not SessionState.ACTIVE:
            return
        self._remote = None
        self._classifier = None
        self.state = SessionState.TERMINATED
        logger.info("Session terminated")

    def check_open(self) -> None:
        """Raise SessionClosedError if the session was terminated."""
        if self.state is SessionState.TERMINATED:
            raise SessionClosedError("File system closed!")

    def ensure_active(self) -> RemoteDrive:
        """Initialize if needed and return the remote handle."""
        self.initialize()
        return self._remote
