"""Temporary local documents bridging viewer state and storage backends."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
import logging
import os
import tempfile

from ..storage.base import SettingsLocator, StorageBackend
from ..viewer.state import ViewerStateStore

logger = logging.getLogger(__name__)

STAGING_PREFIX = "viewer-settings-"
STAGING_SUFFIX = ".json"


@contextmanager
def staged_document(directory: Optional[Path] = None) -> Iterator[Path]:
    """Create a temporary file that is removed when the block exits.

    The file is removed even if the block raises.

    Args:
        directory: Where to create the file (system temp dir if None)

    Yields:
        Path of the empty temporary file
    """
    fd, name = tempfile.mkstemp(
        prefix=STAGING_PREFIX,
        suffix=STAGING_SUFFIX,
        dir=str(directory) if directory is not None else None,
    )
    os.close(fd)
    path = Path(name)
    try:
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove staged document {path}: {e}")


def download_settings(
    backend: StorageBackend,
    locator: SettingsLocator,
    viewer_state: ViewerStateStore,
    staging_dir: Optional[Path] = None,
) -> None:
    """Download a settings document and apply it to the viewer.

    Args:
        backend: Backend holding the document
        locator: Where the document lives
        viewer_state: Sink receiving the document
        staging_dir: Directory for the temporary copy
    """
    with staged_document(staging_dir) as path:
        backend.download_to(locator, path)
        viewer_state.load_from(path)


def upload_settings(
    backend: StorageBackend,
    locator: SettingsLocator,
    viewer_state: ViewerStateStore,
    staging_dir: Optional[Path] = None,
) -> int:
    """Serialize the viewer state and upload it, overwriting the remote copy.

    Args:
        backend: Destination backend
        locator: Where the document goes
        viewer_state: Source of the document
        staging_dir: Directory for the temporary copy

    Returns:
        Number of bytes uploaded
    """
    with staged_document(staging_dir) as path:
        viewer_state.save_to(path)
        data = path.read_bytes()
        backend.upload(locator, data)
        return len(data)
