"""Main application orchestrator."""

import argparse
import customtkinter as ctk
import logging
import sys
import threading
from typing import Optional

from .core.events import EventBus, Event, EventType
from .gui.dialogs.confirm_dialog import GuiConfirmPrompt
from .gui.main_window import MainWindow
from .i18n import _, init_translator
from .persistence.manager import InitResult, SettingsPersistenceManager
from .storage.base import SettingsLocator, StorageError
from .storage.preferences import PreferencesManager
from .storage.registry import default_registry
from .viewer.state import JsonViewerStateStore, ViewerStateError

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    EventType.SETTINGS_LOADED: "status_loaded",
    EventType.SETTINGS_LOAD_FAILED: "status_load_failed",
    EventType.SETTINGS_SAVED: "status_saved",
    EventType.AUTOSAVE_FAILED: "status_autosave_failed",
    EventType.READ_ONLY_FALLBACK: "status_read_only",
}


class ViewerSettingsApp:
    """Main application class that orchestrates all components."""

    def __init__(
        self,
        locator_uri: Optional[str] = None,
        readonly: Optional[bool] = None,
        dataset: bool = False,
        verbose: bool = False,
    ):
        """Initialize the application.

        Args:
            locator_uri: Settings document (or dataset) to open, asked for if None
            readonly: Open without saving, the preference default if None
            dataset: Treat ``locator_uri`` as a dataset root
            verbose: Log debug messages
        """
        self._setup_logging(verbose)

        logger.info("Initializing Viewer Settings Sync")

        # Core services
        self.event_bus = EventBus()
        self.preferences = PreferencesManager()
        self.registry = default_registry()
        self.viewer_state = JsonViewerStateStore()
        self.manager: Optional[SettingsPersistenceManager] = None

        preferences = self.preferences.load()
        init_translator(preferences.language)
        ctk.set_appearance_mode(preferences.theme)
        ctk.set_default_color_theme("blue")

        self._locator_uri = locator_uri
        self._dataset = dataset
        self._readonly = preferences.open_read_only if readonly is None else readonly
        self._initializing = False
        self._closing = False

        # GUI components
        self.window = MainWindow(self, on_close=self.quit)
        self.confirm = GuiConfirmPrompt(self.window)

        self._setup_event_handlers()

    def _setup_logging(self, verbose: bool) -> None:
        """Configure logging."""
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[
                logging.StreamHandler(sys.stdout),
            ],
        )

    def _setup_event_handlers(self) -> None:
        """Set up event subscriptions."""
        for event_type in STATUS_MESSAGES:
            self.event_bus.subscribe(event_type, self._on_settings_event)

        # Viewer state changes come from the GUI and from loads on the init thread
        self.viewer_state.on_changed(
            lambda state: self.window.after(0, lambda: self.window.refresh_state(state))
        )

    def _on_settings_event(self, event: Event) -> None:
        """Show a settings event in the status bar.

        Args:
            event: The event, published from any thread
        """
        error = event.data.error if event.data is not None else None
        message = _(STATUS_MESSAGES[event.type], error=error)
        self.window.after(0, lambda: self.window.set_status(message))

    def _resolve_locator(self) -> Optional[SettingsLocator]:
        uri = self._locator_uri or self._ask_locator()
        if not uri:
            return None

        try:
            if self._dataset:
                return SettingsLocator.for_dataset(uri)
            return SettingsLocator.parse(uri)
        except ValueError as e:
            logger.error(f"Invalid settings locator {uri!r}: {e}")
            self.window.set_status(_("invalid_locator", error=e))
            return None

    def _ask_locator(self) -> str:
        """Ask for a locator, defaulting to the last one used."""
        last = self.preferences.load().last_locator
        text = _("enter_locator")
        if last:
            text += "\n" + _("enter_locator_last", locator=last)

        dialog = ctk.CTkInputDialog(text=text, title=_("app_title"))
        answer = (dialog.get_input() or "").strip()
        return answer or last

    def _open_settings(self) -> None:
        """Create the persistence manager and initialize it off the GUI thread."""
        locator = self._resolve_locator()
        if locator is None:
            return

        try:
            backend = self.registry.create(locator)
        except (KeyError, RuntimeError, StorageError) as e:
            logger.error(f"No storage backend for {locator}: {e}")
            self.window.set_status(_("invalid_locator", error=e))
            return

        self.manager = SettingsPersistenceManager(
            backend,
            locator,
            self.viewer_state,
            self.confirm,
            event_bus=self.event_bus,
            autosave_interval=self.preferences.load().autosave_interval,
        )
        self.preferences.remember_locator(locator.uri)
        self.window.set_locator(locator.uri)

        self._initializing = True
        thread = threading.Thread(target=self._initialize_manager, daemon=True, name="SettingsInit")
        thread.start()

    def _initialize_manager(self) -> None:
        """Run initialization (called in background thread)."""
        try:
            result = self.manager.initialize(self._readonly)
        except (StorageError, ViewerStateError, OSError) as e:
            logger.error(f"Could not open settings {self.manager.locator}: {e}")
            message = _("status_open_failed", error=e)
            self.window.after(0, lambda: self.window.set_status(message))
            return
        finally:
            self._initializing = False

        if self._closing:
            # The window went away while we were opening
            self.manager.on_shutdown()
            return

        self.window.after(0, lambda: self._handle_initialized(result))

    def _handle_initialized(self, result: InitResult) -> None:
        """Handle the initialization result on the GUI thread.

        Args:
            result: The initialization result
        """
        if result is InitResult.CANCELED:
            self.quit()
            return

        self.window.set_result(result)

    def run(self) -> None:
        """Start the application."""
        logger.info("Starting Viewer Settings Sync")

        self.window.refresh_state(self.viewer_state.state)
        self.window.after(100, self._open_settings)
        self.window.mainloop()

    def _cleanup(self) -> None:
        """Save settings one last time and stop autosaving."""
        logger.info("Cleaning up...")
        self._closing = True

        if self.manager is None or self._initializing:
            return

        self.manager.on_shutdown()

    def quit(self) -> None:
        """Quit the application."""
        logger.info("Quitting application")

        self._cleanup()

        try:
            self.window.quit()  # Stop mainloop
            self.window.destroy()
        except Exception as e:
            logger.error(f"Error destroying window: {e}")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="viewer-settings",
        description="Open a viewer session whose settings are kept in remote storage.",
    )
    parser.add_argument(
        "locator",
        nargs="?",
        help="settings document, e.g. gs://bucket/viewer-settings.json or a local path",
    )
    parser.add_argument(
        "--dataset",
        action="store_true",
        help="treat LOCATOR as a dataset root holding viewer-settings.json",
    )
    parser.add_argument(
        "--read-only",
        dest="readonly",
        action="store_const",
        const=True,
        default=None,
        help="never write the settings document",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None):
    """Application entry point."""
    args = parse_args(argv)
    app = ViewerSettingsApp(
        locator_uri=args.locator,
        readonly=args.readonly,
        dataset=args.dataset,
        verbose=args.verbose,
    )
    app.run()


if __name__ == "__main__":
    main()
