"""Viewer state abstraction layer."""

from .state import (
    DeserializeError,
    DisplaySettings,
    JsonViewerStateStore,
    SerializeError,
    ViewerState,
    ViewerStateError,
    ViewerStateStore,
)

__all__ = [
    "DeserializeError",
    "DisplaySettings",
    "JsonViewerStateStore",
    "SerializeError",
    "ViewerState",
    "ViewerStateError",
    "ViewerStateStore",
]
