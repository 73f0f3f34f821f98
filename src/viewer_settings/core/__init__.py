"""Core modules for Viewer Settings Sync."""

from .events import EventBus, Event, EventType, SettingsEventData

__all__ = ["EventBus", "Event", "EventType", "SettingsEventData"]
