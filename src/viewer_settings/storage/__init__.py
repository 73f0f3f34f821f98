"""Storage backends and local preferences."""

from .base import (
    DEFAULT_SETTINGS_FILENAME,
    PermissionDeniedError,
    SettingsLocator,
    StorageBackend,
    StorageError,
    TransportError,
)
from .filesystem import LocalFileBackend
from .gcs import GCS_AVAILABLE, GoogleCloudBackend
from .preferences import AppPreferences, PreferencesManager
from .registry import BackendRegistry, default_registry

__all__ = [
    "DEFAULT_SETTINGS_FILENAME",
    "PermissionDeniedError",
    "SettingsLocator",
    "StorageBackend",
    "StorageError",
    "TransportError",
    "LocalFileBackend",
    "GCS_AVAILABLE",
    "GoogleCloudBackend",
    "AppPreferences",
    "PreferencesManager",
    "BackendRegistry",
    "default_registry",
]
