"""Base storage backend abstraction layer."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import unquote, urlparse
import logging

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILENAME = "viewer-settings.json"

GCS_SCHEME = "gs"
FILE_SCHEME = "file"
GCS_HTTP_HOSTS = ("storage.googleapis.com", "storage.cloud.google.com")


class StorageError(Exception):
    """Base class for backend failures."""


class PermissionDeniedError(StorageError):
    """The caller is not allowed to perform the operation."""


class TransportError(StorageError):
    """The backend could not be reached or failed to complete the request."""


@dataclass(frozen=True)
class SettingsLocator:
    """Where a settings document lives in a backend.

    Attributes:
        scheme: Backend scheme ("file" or "gs")
        key: Object key or filesystem path
        container: Bucket name for object stores, None for files
    """

    scheme: str
    key: str
    container: Optional[str] = None

    @classmethod
    def parse(cls, uri: str) -> "SettingsLocator":
        """Parse a settings URI.

        Accepts ``gs://bucket/key``, ``https://storage.googleapis.com/bucket/key``,
        ``file:///path`` and plain filesystem paths.

        Args:
            uri: The URI or path to parse

        Returns:
            The parsed locator

        Raises:
            ValueError: If the URI has no bucket or no key
        """
        if not uri or not uri.strip():
            raise ValueError("Settings URI is empty")

        uri = uri.strip()
        parsed = urlparse(uri)
        scheme = parsed.scheme.lower()

        if scheme == GCS_SCHEME:
            return cls._object_locator(parsed.netloc, parsed.path, uri)

        if scheme in ("http", "https") and parsed.netloc.lower() in GCS_HTTP_HOSTS:
            bucket, _, key = parsed.path.lstrip("/").partition("/")
            return cls._object_locator(bucket, key, uri)

        if scheme == FILE_SCHEME:
            path = unquote(parsed.path)
            if not path:
                raise ValueError(f"No path in settings URI: {uri}")
            return cls(scheme=FILE_SCHEME, key=path)

        # Windows drive letters parse as a one-letter scheme
        if scheme and len(scheme) > 1:
            raise ValueError(f"Unsupported settings URI scheme '{scheme}': {uri}")

        return cls(scheme=FILE_SCHEME, key=str(Path(uri).expanduser()))

    @classmethod
    def _object_locator(cls, bucket: str, key: str, uri: str) -> "SettingsLocator":
        key = unquote(key).lstrip("/")
        if not bucket:
            raise ValueError(f"No bucket in settings URI: {uri}")
        if not key:
            raise ValueError(f"No object key in settings URI: {uri}")
        return cls(scheme=GCS_SCHEME, key=key, container=bucket)

    @classmethod
    def for_dataset(cls, uri: str, filename: str = DEFAULT_SETTINGS_FILENAME) -> "SettingsLocator":
        """Locate the settings document stored inside a dataset container.

        Args:
            uri: URI of the dataset root (bucket root is allowed)
            filename: Name of the settings document

        Returns:
            Locator of the settings document
        """
        parsed = urlparse(uri.strip())
        scheme = parsed.scheme.lower()
        if scheme == GCS_SCHEME and parsed.path.strip("/") == "":
            return cls.parse(f"gs://{parsed.netloc}/{filename}")

        dataset = cls.parse(uri)
        if dataset.scheme == FILE_SCHEME:
            return cls(scheme=FILE_SCHEME, key=str(Path(dataset.key) / filename))

        key = str(PurePosixPath(dataset.key.rstrip("/")) / filename)
        return cls(scheme=dataset.scheme, key=key, container=dataset.container)

    @property
    def uri(self) -> str:
        """Canonical URI of the locator."""
        if self.scheme == FILE_SCHEME:
            return Path(self.key).as_uri() if Path(self.key).is_absolute() else self.key
        return f"{self.scheme}://{self.container}/{self.key}"

    def __str__(self) -> str:
        return self.uri


class StorageBackend(ABC):
    """Abstract base class for settings storage backends.

    Implementations must raise :class:`PermissionDeniedError` when the
    caller lacks access and :class:`TransportError` for every other
    failure. The persistence manager relies on that distinction.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a human-readable backend name."""
        pass

    @abstractmethod
    def exists(self, locator: SettingsLocator) -> bool:
        """Check whether a document exists at the locator.

        Args:
            locator: Where to look

        Returns:
            True if the document exists
        """
        pass

    @abstractmethod
    def download_to(self, locator: SettingsLocator, local_path: Path) -> None:
        """Download the document into a local file.

        Args:
            locator: Document to download
            local_path: Destination file, overwritten if present
        """
        pass

    @abstractmethod
    def upload(self, locator: SettingsLocator, data: bytes) -> None:
        """Upload bytes, replacing any existing document.

        Args:
            locator: Destination of the document
            data: Document contents
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"
