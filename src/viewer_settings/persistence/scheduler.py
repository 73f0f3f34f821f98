"""Recurring timer driving periodic autosave."""

import threading
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)


class RepeatingTimer:
    """Calls a function every ``interval`` seconds on a daemon thread.

    The first call happens one interval after :meth:`start`. After
    :meth:`cancel` returns, the callback is never invoked again.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "RepeatingTimer"):
        """Initialize the timer.

        Args:
            interval: Seconds between calls
            callback: Function to call
            name: Name of the timer thread
        """
        if interval <= 0:
            raise ValueError("Timer interval must be positive")

        self._interval = interval
        self._callback = callback
        self._name = name
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def interval(self) -> float:
        """Seconds between calls."""
        return self._interval

    @property
    def is_active(self) -> bool:
        """Check if the timer is started and not cancelled."""
        return self._thread is not None and not self._stopped.is_set()

    def start(self) -> None:
        """Start the timer thread.

        Raises:
            RuntimeError: If the timer was already started
        """
        if self._thread is not None:
            raise RuntimeError(f"{self._name} already started")

        self._thread = threading.Thread(target=self._run, daemon=True, name=self._name)
        self._thread.start()
        logger.debug(f"{self._name} started ({self._interval}s interval)")

    def _run(self) -> None:
        """Run the timer loop (called in background thread)."""
        while not self._stopped.wait(self._interval):
            try:
                self._callback()
            except Exception as e:
                logger.error(f"Error in {self._name} callback: {e}")

    def cancel(self) -> None:
        """Stop the timer and wait for a running callback to finish."""
        self._stopped.set()

        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join()

        logger.debug(f"{self._name} cancelled")
