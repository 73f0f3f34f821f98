"""Google Cloud Storage backend."""

from pathlib import Path
from typing import Optional
import logging

from .base import (
    GCS_SCHEME,
    PermissionDeniedError,
    SettingsLocator,
    StorageBackend,
    StorageError,
    TransportError,
)

logger = logging.getLogger(__name__)

try:
    from google.api_core import exceptions as api_exceptions
    from google.auth import exceptions as auth_exceptions
    from google.cloud import storage

    GCS_AVAILABLE = True
    CLIENT_ERRORS = (api_exceptions.GoogleAPICallError, auth_exceptions.GoogleAuthError, OSError)
except ImportError:
    GCS_AVAILABLE = False
    CLIENT_ERRORS = (OSError,)
    logger.warning("google-cloud-storage not installed - gs:// settings will not be available")

FORBIDDEN_RESPONSE_CODE = 403


class GoogleCloudBackend(StorageBackend):
    """Settings documents stored as blobs in Google Cloud Storage buckets."""

    def __init__(self, client: Optional[object] = None, project: Optional[str] = None):
        """Initialize the backend.

        Args:
            client: A ``google.cloud.storage.Client`` (created lazily if None)
            project: Project used when the client is created here
        """
        if client is None and not GCS_AVAILABLE:
            raise RuntimeError("google-cloud-storage is required for gs:// settings")

        self._client = client
        self._project = project

    @property
    def name(self) -> str:
        return "Google Cloud Storage"

    @property
    def client(self):
        """The storage client, created on first use."""
        if self._client is None:
            try:
                self._client = storage.Client(project=self._project)
            except auth_exceptions.DefaultCredentialsError as e:
                raise PermissionDeniedError(f"No Google Cloud credentials: {e}") from e
            logger.info(f"Created Google Cloud Storage client (project={self._client.project})")
        return self._client

    def _blob(self, locator: SettingsLocator):
        if locator.scheme != GCS_SCHEME:
            raise ValueError(f"{self.name} cannot handle '{locator.scheme}' locators")
        return self.client.bucket(locator.container).blob(locator.key)

    def exists(self, locator: SettingsLocator) -> bool:
        blob = self._blob(locator)
        try:
            return bool(blob.exists())
        except CLIENT_ERRORS as e:
            raise self._translate(e, locator) from e

    def download_to(self, locator: SettingsLocator, local_path: Path) -> None:
        blob = self._blob(locator)
        try:
            blob.download_to_filename(str(local_path))
        except CLIENT_ERRORS as e:
            raise self._translate(e, locator) from e
        logger.debug(f"Downloaded {locator} to {local_path}")

    def upload(self, locator: SettingsLocator, data: bytes) -> None:
        blob = self._blob(locator)
        try:
            blob.upload_from_string(data, content_type="application/json")
        except CLIENT_ERRORS as e:
            raise self._translate(e, locator) from e
        logger.debug(f"Uploaded {len(data)} bytes to {locator}")

    @staticmethod
    def _translate(error: Exception, locator: SettingsLocator) -> StorageError:
        """Map a client library error to a backend error kind.

        Only HTTP 403 means missing permissions; everything else, including
        401 and 404, is a transport failure.

        Args:
            error: The raised exception
            locator: Locator of the failed operation

        Returns:
            The error to raise instead
        """
        if getattr(error, "code", None) == FORBIDDEN_RESPONSE_CODE:
            return PermissionDeniedError(f"Access to {locator} denied: {error}")
        return TransportError(f"Google Cloud Storage request for {locator} failed: {error}")
