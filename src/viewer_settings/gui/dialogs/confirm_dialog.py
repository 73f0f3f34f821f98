"""Modal yes/no dialog used for the read-only fallback."""

import customtkinter as ctk
import threading
from typing import Optional
import logging

from ...i18n import _

logger = logging.getLogger(__name__)


class ConfirmDialog(ctk.CTkToplevel):
    """Dialog asking the user to continue or cancel."""

    def __init__(self, parent, message: str, title: Optional[str] = None):
        """Initialize the dialog.

        Args:
            parent: Parent window
            message: Question shown to the user
            title: Window title
        """
        super().__init__(parent)

        self.accepted = False
        self._message = message

        self.title(title or _("app_title"))
        self.resizable(False, False)
        self._setup_ui()

        # Make modal
        self.transient(parent)
        self.grab_set()

        # Center on parent
        self.update_idletasks()
        x = parent.winfo_x() + (parent.winfo_width() - self.winfo_width()) // 2
        y = parent.winfo_y() + (parent.winfo_height() - self.winfo_height()) // 2
        self.geometry(f"+{x}+{y}")

        # Closing the window counts as cancel
        self.protocol("WM_DELETE_WINDOW", self._cancel)

    def _setup_ui(self) -> None:
        """Set up the dialog UI."""
        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self,
            text=self._message,
            font=ctk.CTkFont(size=13),
            wraplength=420,
            justify="left",
        ).grid(row=0, column=0, padx=20, pady=(20, 15), sticky="w")

        button_frame = ctk.CTkFrame(self, fg_color="transparent")
        button_frame.grid(row=1, column=0, padx=20, pady=(0, 20), sticky="e")

        ctk.CTkButton(
            button_frame,
            text=_("cancel"),
            width=100,
            fg_color=("gray70", "gray30"),
            command=self._cancel,
        ).pack(side="right", padx=5)

        ctk.CTkButton(
            button_frame,
            text=_("open_read_only"),
            width=140,
            command=self._accept,
        ).pack(side="right", padx=5)

    def _accept(self) -> None:
        self.accepted = True
        logger.info("User chose to continue read-only")
        self.destroy()

    def _cancel(self) -> None:
        self.accepted = False
        self.destroy()

    def ask(self) -> bool:
        """Wait for the user's answer.

        Returns:
            True if the user chose to continue
        """
        self.wait_window()
        return self.accepted


class GuiConfirmPrompt:
    """Confirm prompt that can be called from any thread.

    Calls from worker threads are handed to the GUI thread and block until
    the user has answered.
    """

    def __init__(self, parent):
        """Initialize the prompt.

        Args:
            parent: Window owning the dialogs (and the GUI thread)
        """
        self._parent = parent
        self._gui_thread = threading.current_thread()

    def __call__(self, message: str) -> bool:
        if threading.current_thread() is self._gui_thread:
            return ConfirmDialog(self._parent, message).ask()

        answered = threading.Event()
        answer = {"accepted": False}

        def show() -> None:
            try:
                answer["accepted"] = ConfirmDialog(self._parent, message).ask()
            finally:
                answered.set()

        self._parent.after(0, show)
        answered.wait()
        return answer["accepted"]
