"""drivefs - Application configuration."""

import os
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    import argparse

__version__ = "0.1.0"


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


class DriveFS:
    """Central configuration for drivefs.

    Values come from command-line arguments, then environment variables,
    then the defaults below.
    """

    credentials_file: str = "client_secret.json"
    token_file: str = "token.json"
    service_account_file: Optional[str] = None
    mime_types_file: Optional[str] = None
    download_dir: Optional[str] = None
    timeout: float = 60.0
    verbose: bool = False

    @classmethod
    def configure(cls, args: Optional["argparse.Namespace"] = None) -> None:
        """Initialize configuration from the environment and parsed CLI args."""
        cls.credentials_file = (getattr(args, 'credentials', None)
                                or os.environ.get('DRIVEFS_CREDENTIALS', 'client_secret.json'))
        cls.token_file = (getattr(args, 'token', None)
                          or os.environ.get('DRIVEFS_TOKEN', 'token.json'))
        cls.service_account_file = (getattr(args, 'service_account', None)
                                    or os.environ.get('DRIVEFS_SERVICE_ACCOUNT'))
        cls.mime_types_file = (getattr(args, 'mime_types', None)
                               or os.environ.get('DRIVEFS_MIME_TYPES'))
        cls.download_dir = (getattr(args, 'download_dir', None)
                            or os.environ.get('DRIVEFS_DOWNLOAD_DIR'))
        cls.timeout = _env_float('DRIVEFS_TIMEOUT', 60.0)
        cls.verbose = getattr(args, 'verbose', False)

    @classmethod
    def filesystem_options(cls) -> Dict[str, Any]:
        """Keyword arguments for the "gdrive" registry factory."""
        return {
            'credentials_file': cls.credentials_file,
            'token_file': cls.token_file,
            'service_account_file': cls.service_account_file,
            'mime_types_file': cls.mime_types_file,
            'download_dir': cls.download_dir,
            'timeout': cls.timeout,
        }
