"""Viewer state and its (de)serialization to settings documents."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict, replace
from pathlib import Path
from typing import Any, Callable, Optional
import copy
import json
import logging
import threading

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

IDENTITY_TRANSFORM = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
)


class ViewerStateError(Exception):
    """Base class for viewer state translation failures."""


class SerializeError(ViewerStateError):
    """The viewer state could not be written to a document."""


class DeserializeError(ViewerStateError):
    """A document could not be applied to the viewer state."""


@dataclass
class DisplaySettings:
    """Contrast and color of one displayed source."""

    min: float = 0.0
    max: float = 65535.0
    color: str = "#ffffff"
    visible: bool = True


@dataclass
class ViewerState:
    """Everything about a viewing session worth restoring.

    ``transform`` is a row-major 3x4 affine (12 values).
    """

    transform: tuple = IDENTITY_TRANSFORM
    bookmarks: dict = field(default_factory=dict)  # name -> transform
    display: dict = field(default_factory=dict)  # source name -> DisplaySettings
    current_source: Optional[str] = None
    current_timepoint: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert the state to a JSON-compatible dictionary."""
        return {
            "schema_version": SCHEMA_VERSION,
            "transform": list(self.transform),
            "bookmarks": {name: list(t) for name, t in self.bookmarks.items()},
            "display": {name: asdict(d) for name, d in self.display.items()},
            "current_source": self.current_source,
            "current_timepoint": self.current_timepoint,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ViewerState":
        """Build a state from a dictionary produced by :meth:`to_dict`.

        Raises:
            DeserializeError: If the dictionary is malformed
        """
        if not isinstance(data, dict):
            raise DeserializeError("Settings document root is not an object")

        version = data.get("schema_version", SCHEMA_VERSION)
        if not isinstance(version, int) or version > SCHEMA_VERSION:
            raise DeserializeError(f"Unsupported settings schema version: {version!r}")

        try:
            return cls(
                transform=_parse_transform(data.get("transform", IDENTITY_TRANSFORM)),
                bookmarks={
                    str(name): _parse_transform(t)
                    for name, t in (data.get("bookmarks") or {}).items()
                },
                display={
                    str(name): _parse_display(d)
                    for name, d in (data.get("display") or {}).items()
                },
                current_source=_parse_source(data.get("current_source")),
                current_timepoint=int(data.get("current_timepoint", 0)),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise DeserializeError(f"Malformed settings document: {e}") from e


def _parse_display(values: dict) -> DisplaySettings:
    if not isinstance(values, dict):
        raise ValueError(f"Display settings must be an object, got {values!r}")

    unknown = set(values) - {"min", "max", "color", "visible"}
    if unknown:
        raise ValueError(f"Unknown display fields: {sorted(unknown)}")

    visible = values.get("visible", True)
    if not isinstance(visible, bool):
        raise ValueError(f"Display visibility must be true or false, got {visible!r}")

    color = values.get("color", "#ffffff")
    if not isinstance(color, str):
        raise ValueError(f"Display color must be a string, got {color!r}")

    display = DisplaySettings(
        min=float(values.get("min", 0.0)),
        max=float(values.get("max", 65535.0)),
        color=color,
        visible=visible,
    )
    if display.min > display.max:
        raise ValueError(f"Display range is inverted: {display.min} > {display.max}")
    return display


def _parse_source(value) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise ValueError(f"Current source must be a string, got {value!r}")
    return value


def _parse_transform(values) -> tuple:
    transform = tuple(float(v) for v in values)
    if len(transform) != len(IDENTITY_TRANSFORM):
        raise ValueError(f"Transform must have {len(IDENTITY_TRANSFORM)} values, got {len(transform)}")
    return transform


class ViewerStateStore(ABC):
    """Source and sink of viewer state for the persistence manager.

    The manager never looks inside the documents these methods produce.
    """

    @abstractmethod
    def load_from(self, path: Path) -> None:
        """Apply the settings document at ``path`` to the viewer.

        Raises:
            DeserializeError: If the document cannot be applied
        """
        pass

    @abstractmethod
    def save_to(self, path: Path) -> None:
        """Write the current viewer state to ``path``.

        Raises:
            SerializeError: If the state cannot be written
        """
        pass


class JsonViewerStateStore(ViewerStateStore):
    """Thread-safe in-memory viewer state stored as JSON documents.

    The GUI edits the state on its own thread while autosave ticks
    serialize it from the timer thread.
    """

    def __init__(self, state: Optional[ViewerState] = None):
        self._state = state or ViewerState()
        self._lock = threading.Lock()
        self._on_changed: list[Callable[[ViewerState], None]] = []

    @property
    def state(self) -> ViewerState:
        """Get a copy of the current state."""
        with self._lock:
            return copy.deepcopy(self._state)

    def replace(self, state: ViewerState) -> None:
        """Replace the whole state.

        Args:
            state: The new state
        """
        with self._lock:
            self._state = copy.deepcopy(state)
        self._notify()

    def update(self, **changes) -> ViewerState:
        """Change individual state fields.

        Args:
            **changes: Field names and new values

        Returns:
            A copy of the updated state
        """
        with self._lock:
            self._state = replace(self._state, **changes)
        self._notify()
        return self.state

    def add_bookmark(self, name: str, transform: Optional[tuple] = None) -> None:
        """Store a bookmark, replacing one with the same name.

        Args:
            name: Bookmark name
            transform: View transform (the current one if None)
        """
        if not name:
            raise ValueError("Bookmark name must not be empty")
        with self._lock:
            self._state.bookmarks[name] = tuple(transform or self._state.transform)
        self._notify()

    def remove_bookmark(self, name: str) -> bool:
        """Remove a bookmark.

        Args:
            name: Bookmark name

        Returns:
            True if the bookmark existed
        """
        with self._lock:
            removed = self._state.bookmarks.pop(name, None) is not None
        if removed:
            self._notify()
        return removed

    def set_display(self, source: str, **changes) -> DisplaySettings:
        """Change the display settings of a source, creating them if needed.

        Args:
            source: Source name
            **changes: DisplaySettings fields to change

        Returns:
            The updated display settings
        """
        with self._lock:
            current = self._state.display.get(source, DisplaySettings())
            updated = replace(current, **changes)
            if updated.min > updated.max:
                raise ValueError(f"Display range of {source} is inverted: {updated.min} > {updated.max}")
            self._state.display[source] = updated
        self._notify()
        return replace(updated)

    def on_changed(self, callback: Callable[[ViewerState], None]) -> None:
        """Register a callback for state changes.

        Args:
            callback: Function called with a copy of the new state
        """
        self._on_changed.append(callback)

    def _notify(self) -> None:
        state = self.state
        for callback in self._on_changed:
            try:
                callback(state)
            except Exception as e:
                logger.error(f"Error in viewer state callback: {e}")

    def load_from(self, path: Path) -> None:
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DeserializeError(f"Cannot read settings document {path}: {e}") from e

        self.replace(ViewerState.from_dict(data))
        logger.debug(f"Viewer state loaded from {path}")

    def save_to(self, path: Path) -> None:
        with self._lock:
            data = self._state.to_dict()
        try:
            text = json.dumps(data, indent=2, sort_keys=True)
            Path(path).write_text(text, encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            raise SerializeError(f"Cannot write settings document {path}: {e}") from e
