"""Google Drive transport."""

import logging
import os
from typing import BinaryIO, Dict, Optional

import httplib2
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload, MediaIoBaseDownload

from .base import FileSystemError, RemoteObject, TransportError
from .query import Query
from .remote import DEFAULT_FIELDS, RemoteDrive, SearchPage
from utils.retry import (
    TRANSIENT_HTTP_STATUS_CODES,
    call_with_retry,
    is_transient_network_error,
)

logger = logging.getLogger(__name__)

SCOPES = ['https://www.googleapis.com/auth/drive']

OAUTH_PORT = 8888
DEFAULT_TIMEOUT = 60.0
PAGE_SIZE = 100


# ---------------------------------------------------------------------------
# Retry Configuration
# ---------------------------------------------------------------------------

def _is_retryable_gdrive_error(exc: Exception) -> bool:
    """Determine if a Google Drive API error should be retried."""
    if isinstance(exc, HttpError):
        return exc.resp.status in TRANSIENT_HTTP_STATUS_CODES
    return is_transient_network_error(exc)


def _log_retry(exc: Exception, attempt: int, delay: float) -> None:
    if isinstance(exc, HttpError):
        error_desc = f"HTTP {exc.resp.status}"
    else:
        error_desc = type(exc).__name__
    logger.warning("[Retry] %s on attempt %d, retrying in %.1fs...", error_desc, attempt, delay)


def _execute_with_retry(request, max_retries: int = 5):
    """Execute a Google Drive API request with automatic retry."""
    return call_with_retry(
        request.execute,
        is_retryable=_is_retryable_gdrive_error,
        max_retries=max_retries,
        on_retry=_log_retry,
    )


def _download_with_retry(request, destination: BinaryIO, max_retries: int = 5) -> None:
    """Download media chunk by chunk, retrying each chunk."""
    downloader = MediaIoBaseDownload(destination, request)
    done = False
    while not done:
        _, done = call_with_retry(
            downloader.next_chunk,
            is_retryable=_is_retryable_gdrive_error,
            max_retries=max_retries,
            on_retry=_log_retry,
        )


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def load_credentials(credentials_file: str = "client_secret.json",
                     token_file: str = "token.json",
                     service_account_file: Optional[str] = None):
    """Load Google credentials.

    A service account key is used when given. Otherwise the cached user
    token is loaded and refreshed; if there is none, the installed-app
    OAuth flow runs in the browser and the token is cached for next time.

    Args:
        credentials_file: OAuth client secrets JSON
        token_file: Where the user token is cached
        service_account_file: Service account key JSON

    Returns:
        Credentials for the Drive API
    """
    if service_account_file:
        return service_account.Credentials.from_service_account_file(
            service_account_file, scopes=SCOPES
        )

    creds = None
    if os.path.exists(token_file):
        creds = Credentials.from_authorized_user_file(token_file, SCOPES)

    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        else:
            flow = InstalledAppFlow.from_client_secrets_file(credentials_file, SCOPES)
            creds = flow.run_local_server(port=OAUTH_PORT)

        with open(token_file, 'w') as token:
            token.write(creds.to_json())
        os.chmod(token_file, 0o600)

    return creds


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class GoogleDriveRemote(RemoteDrive):
    """RemoteDrive over the Google Drive v3 API."""

    def __init__(self, service, page_size: int = PAGE_SIZE, max_retries: int = 5) -> None:
        """
        Args:
            service: Drive v3 service from ``googleapiclient.discovery.build``
            page_size: Results per search page
            max_retries: Retries for transient errors per request
        """
        self.service = service
        self.page_size = page_size
        self.max_retries = max_retries

    @classmethod
    def connect(cls, credentials_file: str = "client_secret.json",
                token_file: str = "token.json",
                service_account_file: Optional[str] = None,
                timeout: float = DEFAULT_TIMEOUT) -> "GoogleDriveRemote":
        """Authenticate and build the Drive service.

        Raises:
            TransportError: If authentication or service discovery fails
        """
        try:
            creds = load_credentials(credentials_file, token_file, service_account_file)
            http = AuthorizedHttp(creds, http=httplib2.Http(timeout=timeout))
            service = build('drive', 'v3', http=http, cache_discovery=False)
        except Exception as e:
            raise TransportError(f"Failed to initialize Google Drive: {e}", e) from e

        logger.info("Connected to Google Drive")
        return cls(service)

    def _execute(self, request, action: str):
        try:
            return _execute_with_retry(request, self.max_retries)
        except Exception as e:
            raise TransportError(f"Failed to {action}: {e}", e) from e

    def search(self, query: Query, fields: str = DEFAULT_FIELDS,
               page_token: Optional[str] = None) -> SearchPage:
        request = self.service.files().list(
            q=str(query),
            spaces='drive',
            pageSize=self.page_size,
            fields=f"nextPageToken, files({fields})",
            pageToken=page_token,
        )
        response = self._execute(request, f"search ({query})")
        return SearchPage(
            items=[RemoteObject.from_api(item) for item in response.get('files', [])],
            next_page_token=response.get('nextPageToken'),
        )

    def create_object(self, metadata: Dict, content_path: Optional[str] = None,
                      content_type: Optional[str] = None) -> str:
        media = None
        if content_path is not None:
            try:
                media = MediaFileUpload(content_path, mimetype=content_type, resumable=True)
            except OSError as e:
                raise FileSystemError(f"Failed to read {content_path}: {e}") from e

        request = self.service.files().create(
            body=metadata,
            media_body=media,
            fields='id',
        )
        result = self._execute(request, f"create {metadata.get('name')}")
        return result['id']

    def get_content(self, file_id: str, destination: BinaryIO) -> None:
        request = self.service.files().get_media(fileId=file_id)
        try:
            _download_with_retry(request, destination, self.max_retries)
        except Exception as e:
            raise TransportError(f"Failed to download {file_id}: {e}", e) from e
