"""Lifecycle of a viewer settings document in remote storage.

The manager loads the settings document when a dataset is opened, finds out
whether the user may write it back, and keeps it up to date with periodic
and shutdown saves::

    manager = SettingsPersistenceManager(backend, locator, viewer_state, confirm)
    result = manager.initialize(readonly=False)
    ...
    manager.on_shutdown()

Write access is detected by attempting a real save. Permission queries
require a permission of their own and are often disabled.

Two sessions writing the same locator are not coordinated; the last save
wins.
"""

from enum import Enum
from pathlib import Path
from typing import Callable, Optional
import logging
import threading

from ..core.events import Event, EventBus, EventType, SettingsEventData
from ..storage.base import PermissionDeniedError, SettingsLocator, StorageBackend, StorageError
from ..storage.preferences import DEFAULT_AUTOSAVE_INTERVAL
from ..viewer.state import ViewerStateError, ViewerStateStore
from .scheduler import RepeatingTimer
from .staging import download_settings, upload_settings

logger = logging.getLogger(__name__)

ConfirmPrompt = Callable[[str], bool]
TimerFactory = Callable[[float, Callable[[], None]], RepeatingTimer]

READ_ONLY_PROMPT = (
    "You do not have write permissions for saving the viewer settings "
    "such as bookmarks, contrast, etc.\n"
    "Would you like to open the dataset anyway (read-only)?"
)


class InitResult(Enum):
    """Outcome of :meth:`SettingsPersistenceManager.initialize`."""

    LOADED = "loaded"
    LOADED_READ_ONLY = "loaded_read_only"
    NOT_LOADED = "not_loaded"
    NOT_LOADED_READ_ONLY = "not_loaded_read_only"
    CANCELED = "canceled"

    @property
    def is_loaded(self) -> bool:
        """Check if an existing settings document was found."""
        return self in (InitResult.LOADED, InitResult.LOADED_READ_ONLY)

    @property
    def is_read_only(self) -> bool:
        """Check if the session continues without saving."""
        return self in (InitResult.LOADED_READ_ONLY, InitResult.NOT_LOADED_READ_ONLY)

    @classmethod
    def from_flags(cls, present: bool, writable: bool) -> "InitResult":
        if present:
            return cls.LOADED if writable else cls.LOADED_READ_ONLY
        return cls.NOT_LOADED if writable else cls.NOT_LOADED_READ_ONLY


class ManagerState(Enum):
    """Lifecycle states of the manager."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    FINALIZED = "finalized"


class AlreadyInitializedError(RuntimeError):
    """``initialize`` was called more than once."""


def always(answer: bool) -> ConfirmPrompt:
    """Build a prompt that gives the same answer without asking.

    Args:
        answer: True to continue read-only, False to cancel

    Returns:
        A confirm prompt for hosts without a user interface
    """

    def prompt(message: str) -> bool:
        logger.info(f"Answering {'yes' if answer else 'no'} to: {message}")
        return answer

    return prompt


class SettingsPersistenceManager:
    """Loads, probes and autosaves one remote settings document."""

    def __init__(
        self,
        backend: StorageBackend,
        locator: SettingsLocator,
        viewer_state: ViewerStateStore,
        confirm: ConfirmPrompt,
        event_bus: Optional[EventBus] = None,
        autosave_interval: float = DEFAULT_AUTOSAVE_INTERVAL,
        timer_factory: TimerFactory = RepeatingTimer,
        staging_dir: Optional[Path] = None,
    ):
        """Initialize the manager.

        Args:
            backend: Storage backend holding the document
            locator: Where the document lives
            viewer_state: Viewer state source and sink
            confirm: Asks the user whether to continue read-only
            event_bus: Optional bus receiving load/save events
            autosave_interval: Seconds between autosaves
            timer_factory: Creates the recurring timer from (interval, callback)
            staging_dir: Directory for temporary documents
        """
        self._backend = backend
        self._locator = locator
        self._viewer_state = viewer_state
        self._confirm = confirm
        self._event_bus = event_bus
        self._autosave_interval = autosave_interval
        self._timer_factory = timer_factory
        self._staging_dir = staging_dir

        self._lock = threading.RLock()
        self._state = ManagerState.UNINITIALIZED
        self._timer: Optional[RepeatingTimer] = None
        self._result: Optional[InitResult] = None
        self._writable = False

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def locator(self) -> SettingsLocator:
        return self._locator

    @property
    def state(self) -> ManagerState:
        with self._lock:
            return self._state

    @property
    def result(self) -> Optional[InitResult]:
        """The initialization result, None before initialization."""
        with self._lock:
            return self._result

    @property
    def is_writable(self) -> bool:
        with self._lock:
            return self._writable

    def initialize(self, readonly: bool = False) -> InitResult:
        """Load the settings document and set up saving.

        Args:
            readonly: Skip the write probe and never save

        Returns:
            The initialization result

        Raises:
            AlreadyInitializedError: If called more than once
            StorageError: If the backend is unreachable or the write probe
                fails for a reason other than missing permissions
        """
        with self._lock:
            if self._state is not ManagerState.UNINITIALIZED:
                raise AlreadyInitializedError(f"Settings for {self._locator} have already been initialized")

            try:
                result = self._load_and_probe(readonly)
            except BaseException:
                self._state = ManagerState.FINALIZED
                raise

            self._result = result
            if result is not InitResult.CANCELED and self._writable:
                self._arm_autosave()
                self._state = ManagerState.ACTIVE
            else:
                self._state = ManagerState.FINALIZED

            logger.info(f"Settings for {self._locator} initialized: {result.name}")
            return result

    def on_autosave_tick(self) -> None:
        """Save from the timer; failures are reported, never raised."""
        with self._lock:
            if self._state is not ManagerState.ACTIVE:
                return

            try:
                self._save()
            except Exception as e:
                logger.error(f"Autosave to {self._locator} failed: {e}")
                self._publish(EventType.AUTOSAVE_FAILED, e)

    def on_shutdown(self) -> None:
        """Save one last time and stop autosaving.

        Does nothing unless the manager is active. When this returns, no
        autosave tick runs anymore.
        """
        with self._lock:
            if self._state is not ManagerState.ACTIVE:
                return

            try:
                self._save()
            except Exception as e:
                logger.error(f"Saving settings to {self._locator} on shutdown failed: {e}")
                self._publish(EventType.SHUTDOWN_SAVE_FAILED, e)

            timer, self._timer = self._timer, None
            self._state = ManagerState.FINALIZED

        # Outside the lock: a tick waiting for it must be able to finish
        if timer is not None:
            timer.cancel()
        logger.info(f"Stopped saving settings to {self._locator}")

    def _load_and_probe(self, readonly: bool) -> InitResult:
        present = self._backend.exists(self._locator)
        if present:
            self._load()

        self._writable = False
        if not readonly:
            try:
                self._save()
                self._writable = True
            except PermissionDeniedError as e:
                logger.warning(f"No write access to {self._locator}: {e}")
                if not self._confirm(READ_ONLY_PROMPT):
                    logger.info("Opening canceled by the user")
                    return InitResult.CANCELED
                self._publish(EventType.READ_ONLY_FALLBACK, e)

        return InitResult.from_flags(present, self._writable)

    def _load(self) -> None:
        try:
            download_settings(self._backend, self._locator, self._viewer_state, self._staging_dir)
        except (StorageError, ViewerStateError, OSError) as e:
            logger.warning(f"Failed to load settings from {self._locator}, using defaults: {e}")
            self._publish(EventType.SETTINGS_LOAD_FAILED, e)
            return

        logger.info(f"Settings loaded from {self._locator}")
        self._publish(EventType.SETTINGS_LOADED)

    def _save(self) -> None:
        size = upload_settings(self._backend, self._locator, self._viewer_state, self._staging_dir)
        logger.info(f"Settings saved to {self._locator} ({size} bytes)")
        self._publish(EventType.SETTINGS_SAVED)

    def _arm_autosave(self) -> None:
        self._timer = self._timer_factory(self._autosave_interval, self.on_autosave_tick)
        self._timer.start()
        logger.debug(f"Autosaving {self._locator} every {self._autosave_interval}s")

    def _publish(self, event_type: EventType, error: Optional[BaseException] = None) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(Event(event_type, SettingsEventData(self._locator, error)))
