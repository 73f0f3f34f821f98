"""Local filesystem storage backend."""

import os
import shutil
from pathlib import Path
from typing import Optional
import logging

from .base import (
    FILE_SCHEME,
    PermissionDeniedError,
    SettingsLocator,
    StorageBackend,
    TransportError,
)

logger = logging.getLogger(__name__)


class LocalFileBackend(StorageBackend):
    """Stores settings documents as plain files.

    Works for local disks and mounted network shares alike.
    """

    def __init__(self, root: Optional[Path] = None):
        """Initialize the backend.

        Args:
            root: Directory that relative locator keys resolve against
                  (the current directory if None)
        """
        self._root = Path(root) if root is not None else None

    @property
    def name(self) -> str:
        return "Local filesystem"

    def resolve(self, locator: SettingsLocator) -> Path:
        """Map a locator to a filesystem path.

        Args:
            locator: A ``file`` locator

        Returns:
            The resolved path

        Raises:
            ValueError: If the locator is not a file locator
        """
        if locator.scheme != FILE_SCHEME:
            raise ValueError(f"{self.name} cannot handle '{locator.scheme}' locators")

        path = Path(locator.key).expanduser()
        if self._root is not None and not path.is_absolute():
            path = self._root / path
        return path

    def exists(self, locator: SettingsLocator) -> bool:
        path = self.resolve(locator)
        try:
            return path.is_file()
        except PermissionError as e:
            raise PermissionDeniedError(f"Cannot access {path}: {e}") from e
        except OSError as e:
            raise TransportError(f"Cannot access {path}: {e}") from e

    def download_to(self, locator: SettingsLocator, local_path: Path) -> None:
        path = self.resolve(locator)
        try:
            shutil.copyfile(path, local_path)
        except PermissionError as e:
            raise PermissionDeniedError(f"Cannot read {path}: {e}") from e
        except OSError as e:
            raise TransportError(f"Cannot read {path}: {e}") from e
        logger.debug(f"Copied {path} to {local_path}")

    def upload(self, locator: SettingsLocator, data: bytes) -> None:
        path = self.resolve(locator)
        tmp = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write next to the target and swap, so readers never see a partial file
            tmp.write_bytes(data)
            os.replace(tmp, path)
        except PermissionError as e:
            self._discard(tmp)
            raise PermissionDeniedError(f"Cannot write {path}: {e}") from e
        except OSError as e:
            self._discard(tmp)
            raise TransportError(f"Cannot write {path}: {e}") from e
        logger.debug(f"Wrote {len(data)} bytes to {path}")

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.debug(f"Could not remove {path}: {e}")
