"""Event system for decoupled communication between components."""

from enum import Enum
from dataclasses import dataclass
from typing import Any, Callable, Optional
import logging

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can be emitted."""

    # Remote settings document
    SETTINGS_LOADED = "settings_loaded"
    SETTINGS_LOAD_FAILED = "settings_load_failed"
    SETTINGS_SAVED = "settings_saved"
    AUTOSAVE_FAILED = "autosave_failed"
    SHUTDOWN_SAVE_FAILED = "shutdown_save_failed"
    READ_ONLY_FALLBACK = "read_only_fallback"


@dataclass
class Event:
    """An event with type and associated data."""

    type: EventType
    data: Any = None


@dataclass
class SettingsEventData:
    """Payload for settings persistence events."""

    locator: Any
    error: Optional[BaseException] = None


class EventBus:
    """Simple event bus for publish/subscribe communication."""

    def __init__(self):
        self._subscribers: dict[EventType, list[Callable[[Event], None]]] = {}

    def subscribe(self, event_type: EventType, callback: Callable[[Event], None]) -> None:
        """Subscribe to events of a specific type.

        Args:
            event_type: The type of event to subscribe to
            callback: Function to call when event is published
        """
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []

        if callback not in self._subscribers[event_type]:
            self._subscribers[event_type].append(callback)

    def unsubscribe(self, event_type: EventType, callback: Callable[[Event], None]) -> None:
        """Unsubscribe from events of a specific type.

        Args:
            event_type: The type of event to unsubscribe from
            callback: The callback to remove
        """
        if event_type in self._subscribers:
            try:
                self._subscribers[event_type].remove(callback)
            except ValueError:
                pass

    def publish(self, event: Event) -> None:
        """Publish an event to all subscribers.

        A failing subscriber is logged and does not stop delivery to the
        others, so publishing is safe from timer threads.

        Args:
            event: The event to publish
        """
        for callback in list(self._subscribers.get(event.type, [])):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.type}: {e}")
