"""Local application preferences management."""

import json
import os
from pathlib import Path
from dataclasses import dataclass, asdict, field
from typing import Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_AUTOSAVE_INTERVAL = 300  # seconds
MIN_AUTOSAVE_INTERVAL = 5  # seconds
MAX_RECENT_LOCATORS = 10


@dataclass
class AppPreferences:
    """Application preferences with defaults."""

    # Appearance
    theme: str = "dark"  # "dark", "light", or "system"
    language: str = "en"

    # Window
    window_width: int = 900
    window_height: int = 600

    # Remote settings
    autosave_interval: int = DEFAULT_AUTOSAVE_INTERVAL  # seconds
    open_read_only: bool = False
    last_locator: str = ""
    recent_locators: list = field(default_factory=list)


class PreferencesManager:
    """Manages local preferences persistence.

    These are the viewer application's own preferences. The per-dataset
    viewer settings go through the persistence manager instead.
    """

    def __init__(self, app_name: str = "ViewerSettingsSync", preferences_dir: Optional[Path] = None):
        """Initialize the preferences manager.

        Args:
            app_name: Name of the application (used for config directory)
            preferences_dir: Explicit directory, overrides the platform default
        """
        self._app_name = app_name
        self._preferences_dir = Path(preferences_dir) if preferences_dir else self._get_preferences_dir()
        self._preferences_file = self._preferences_dir / "preferences.json"
        self._preferences: Optional[AppPreferences] = None

    def _get_preferences_dir(self) -> Path:
        """Get the appropriate preferences directory for the platform."""
        if os.name == "nt":  # Windows
            base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        else:  # Linux/Mac
            base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

        return base / self._app_name

    def load(self) -> AppPreferences:
        """Load preferences from disk or return defaults.

        Returns:
            The loaded or default preferences
        """
        if self._preferences is not None:
            return self._preferences

        if self._preferences_file.exists():
            try:
                with open(self._preferences_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                    self._preferences = AppPreferences(**data)
                    logger.info(f"Preferences loaded from {self._preferences_file}")
            except (json.JSONDecodeError, TypeError) as e:
                logger.warning(f"Failed to load preferences, using defaults: {e}")
                self._preferences = AppPreferences()
        else:
            self._preferences = AppPreferences()
            logger.info("No preferences file found, using defaults")

        self._preferences.autosave_interval = clamp_autosave_interval(self._preferences.autosave_interval)
        return self._preferences

    def save(self, preferences: Optional[AppPreferences] = None) -> None:
        """Save preferences to disk.

        Args:
            preferences: Preferences to save (uses current if None)
        """
        if preferences is not None:
            self._preferences = preferences

        if self._preferences is None:
            return

        self._preferences_dir.mkdir(parents=True, exist_ok=True)

        try:
            with open(self._preferences_file, "w", encoding="utf-8") as f:
                json.dump(asdict(self._preferences), f, indent=2)
            logger.info(f"Preferences saved to {self._preferences_file}")
        except IOError as e:
            logger.error(f"Failed to save preferences: {e}")

    def update(self, **kwargs) -> AppPreferences:
        """Update specific preferences and save.

        Args:
            **kwargs: Preference names and values to update

        Returns:
            The updated preferences
        """
        preferences = self.load()

        for key, value in kwargs.items():
            if key == "autosave_interval":
                value = clamp_autosave_interval(value)
            if hasattr(preferences, key):
                setattr(preferences, key, value)
            else:
                logger.warning(f"Unknown preference: {key}")

        self.save(preferences)
        return preferences

    def remember_locator(self, uri: str) -> AppPreferences:
        """Record a settings locator as the most recently used one.

        Args:
            uri: The locator URI

        Returns:
            The updated preferences
        """
        preferences = self.load()
        recent = [u for u in preferences.recent_locators if u != uri]
        recent.insert(0, uri)
        return self.update(last_locator=uri, recent_locators=recent[:MAX_RECENT_LOCATORS])

    @property
    def preferences_dir(self) -> Path:
        """Get the preferences directory path."""
        return self._preferences_dir


def clamp_autosave_interval(seconds) -> int:
    """Coerce an autosave interval to a sane integer number of seconds."""
    try:
        seconds = int(seconds)
    except (TypeError, ValueError):
        return DEFAULT_AUTOSAVE_INTERVAL
    return max(MIN_AUTOSAVE_INTERVAL, seconds)
