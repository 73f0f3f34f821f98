"""Backend registry mapping locator schemes to storage backends."""

from typing import Callable
import logging

from .base import FILE_SCHEME, GCS_SCHEME, SettingsLocator, StorageBackend
from .filesystem import LocalFileBackend
from .gcs import GCS_AVAILABLE, GoogleCloudBackend

logger = logging.getLogger(__name__)

BackendFactory = Callable[[], StorageBackend]


class BackendRegistry:
    """Registry for storage backends.

    Backends are created lazily, once per scheme, so a single client
    serves every locator of that scheme.
    """

    def __init__(self):
        self._factories: dict[str, BackendFactory] = {}
        self._backends: dict[str, StorageBackend] = {}

    @property
    def schemes(self) -> list[str]:
        """Get all registered schemes."""
        return list(self._factories.keys())

    def register(self, scheme: str, factory: BackendFactory) -> bool:
        """Register a backend factory for a scheme.

        Args:
            scheme: Locator scheme, e.g. "gs"
            factory: Callable creating the backend

        Returns:
            True if registered, False if the scheme was already taken
        """
        scheme = scheme.lower()
        if scheme in self._factories:
            logger.debug(f"Scheme '{scheme}' already registered")
            return False

        self._factories[scheme] = factory
        logger.debug(f"Registered storage backend for '{scheme}'")
        return True

    def unregister(self, scheme: str) -> bool:
        """Remove a scheme and any backend created for it.

        Args:
            scheme: The scheme to remove

        Returns:
            True if the scheme was registered
        """
        scheme = scheme.lower()
        self._backends.pop(scheme, None)
        return self._factories.pop(scheme, None) is not None

    def create(self, locator: SettingsLocator) -> StorageBackend:
        """Get the backend serving a locator.

        Args:
            locator: The settings locator

        Returns:
            The backend for the locator's scheme

        Raises:
            KeyError: If no backend is registered for the scheme
        """
        scheme = locator.scheme.lower()
        if scheme not in self._factories:
            raise KeyError(f"No storage backend registered for '{scheme}'")

        backend = self._backends.get(scheme)
        if backend is None:
            backend = self._factories[scheme]()
            self._backends[scheme] = backend
            logger.info(f"Using {backend.name} for '{scheme}' settings")
        return backend

    def __contains__(self, scheme: str) -> bool:
        """Check if a scheme is registered."""
        return scheme.lower() in self._factories

    def __len__(self) -> int:
        """Get the number of registered schemes."""
        return len(self._factories)


def default_registry() -> BackendRegistry:
    """Create a registry with every backend available in this environment."""
    registry = BackendRegistry()
    registry.register(FILE_SCHEME, LocalFileBackend)
    if GCS_AVAILABLE:
        registry.register(GCS_SCHEME, GoogleCloudBackend)
    return registry
