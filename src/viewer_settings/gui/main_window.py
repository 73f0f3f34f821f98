"""Main application window."""

import customtkinter as ctk
from typing import TYPE_CHECKING, Callable, Optional
import logging

from .components.bookmark_list import BookmarkList
from .dialogs.preferences_dialog import PreferencesDialog
from ..i18n import _
from ..persistence.manager import InitResult
from ..viewer.state import DisplaySettings, ViewerState

if TYPE_CHECKING:
    from ..app import ViewerSettingsApp

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "channel 0"


class MainWindow(ctk.CTk):
    """Main application window."""

    def __init__(
        self,
        app: "ViewerSettingsApp",
        on_close: Optional[Callable] = None,
        **kwargs,
    ):
        """Initialize the main window.

        Args:
            app: The main application instance
            on_close: Callback when window is closed
            **kwargs: Additional arguments for CTk
        """
        super().__init__(**kwargs)

        self.app = app
        self._on_close = on_close

        self._setup_window()
        self._setup_ui()
        self._bind_events()

    def _setup_window(self) -> None:
        """Configure the window."""
        self.title(_("app_title"))

        preferences = self.app.preferences.load()
        width = preferences.window_width
        height = preferences.window_height

        # Center window on screen
        screen_width = self.winfo_screenwidth()
        screen_height = self.winfo_screenheight()
        x = (screen_width - width) // 2
        y = (screen_height - height) // 2

        self.geometry(f"{width}x{height}+{x}+{y}")
        self.minsize(640, 420)

    def _setup_ui(self) -> None:
        """Set up the user interface."""
        self.grid_rowconfigure(1, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._setup_header()

        body = ctk.CTkFrame(self, fg_color="transparent")
        body.grid(row=1, column=0, sticky="nsew", padx=10, pady=10)
        body.grid_columnconfigure((0, 1), weight=1)
        body.grid_rowconfigure(0, weight=1)

        left = ctk.CTkFrame(body, fg_color="transparent")
        left.grid(row=0, column=0, sticky="nsew", padx=(0, 5))
        self._setup_view_panel(left)
        self._setup_contrast_panel(left)

        right = ctk.CTkFrame(body)
        right.grid(row=0, column=1, sticky="nsew", padx=(5, 0))
        self._setup_bookmark_panel(right)

        self._setup_footer()

    def _setup_header(self) -> None:
        """Set up the header bar."""
        header = ctk.CTkFrame(self, height=50, corner_radius=0)
        header.grid(row=0, column=0, sticky="ew")
        header.grid_columnconfigure(1, weight=1)

        title = ctk.CTkLabel(
            header,
            text=_("app_title"),
            font=ctk.CTkFont(size=18, weight="bold"),
        )
        title.grid(row=0, column=0, padx=15, pady=10)

        self.locator_label = ctk.CTkLabel(
            header,
            text="",
            font=ctk.CTkFont(size=11),
            text_color="gray",
        )
        self.locator_label.grid(row=0, column=1, padx=10, pady=10, sticky="w")

        preferences_btn = ctk.CTkButton(
            header,
            text="\U00002699",  # Gear icon
            width=40,
            command=self._show_preferences,
        )
        preferences_btn.grid(row=0, column=2, padx=5, pady=10)

        self.theme_btn = ctk.CTkButton(
            header,
            text="\U0001F319",  # Moon icon
            width=40,
            command=self._toggle_theme,
        )
        self.theme_btn.grid(row=0, column=3, padx=(0, 15), pady=10)

    def _setup_view_panel(self, parent) -> None:
        frame = ctk.CTkFrame(parent)
        frame.pack(fill="x", pady=(0, 10))

        ctk.CTkLabel(
            frame,
            text=_("view_transform"),
            font=ctk.CTkFont(size=14, weight="bold"),
        ).grid(row=0, column=0, columnspan=2, sticky="w", padx=10, pady=(10, 5))

        self._view_entries: dict[str, ctk.CTkEntry] = {}
        for row, (field_name, label_key) in enumerate(
            [("scale", "zoom"), ("tx", "offset_x"), ("ty", "offset_y"), ("tz", "offset_z")], start=1
        ):
            ctk.CTkLabel(frame, text=_(label_key), width=80, anchor="w").grid(row=row, column=0, padx=10, pady=2)
            entry = ctk.CTkEntry(frame, width=120)
            entry.grid(row=row, column=1, padx=10, pady=2, sticky="w")
            self._view_entries[field_name] = entry

        ctk.CTkButton(frame, text=_("apply"), width=100, command=self._apply_view).grid(
            row=5, column=1, padx=10, pady=(5, 10), sticky="w"
        )

    def _setup_contrast_panel(self, parent) -> None:
        frame = ctk.CTkFrame(parent)
        frame.pack(fill="x")

        ctk.CTkLabel(
            frame,
            text=_("contrast"),
            font=ctk.CTkFont(size=14, weight="bold"),
        ).grid(row=0, column=0, columnspan=2, sticky="w", padx=10, pady=(10, 5))

        self._contrast_entries: dict[str, ctk.CTkEntry] = {}
        for row, (field_name, label_key) in enumerate(
            [("source", "source"), ("min", "range_min"), ("max", "range_max")], start=1
        ):
            ctk.CTkLabel(frame, text=_(label_key), width=80, anchor="w").grid(row=row, column=0, padx=10, pady=2)
            entry = ctk.CTkEntry(frame, width=120)
            entry.grid(row=row, column=1, padx=10, pady=2, sticky="w")
            self._contrast_entries[field_name] = entry

        ctk.CTkButton(frame, text=_("apply"), width=100, command=self._apply_contrast).grid(
            row=4, column=1, padx=10, pady=(5, 10), sticky="w"
        )

    def _setup_bookmark_panel(self, parent) -> None:
        parent.grid_columnconfigure(0, weight=1)
        parent.grid_rowconfigure(1, weight=1)

        ctk.CTkLabel(
            parent,
            text=_("bookmarks"),
            font=ctk.CTkFont(size=14, weight="bold"),
        ).grid(row=0, column=0, sticky="w", padx=10, pady=(10, 5))

        self.bookmark_list = BookmarkList(
            parent,
            on_go=self._handle_go_to_bookmark,
            on_remove=self._handle_remove_bookmark,
        )
        self.bookmark_list.grid(row=1, column=0, sticky="nsew", padx=10, pady=5)

        add_frame = ctk.CTkFrame(parent, fg_color="transparent")
        add_frame.grid(row=2, column=0, sticky="ew", padx=10, pady=(5, 10))
        add_frame.grid_columnconfigure(0, weight=1)

        self.new_bookmark_entry = ctk.CTkEntry(add_frame, placeholder_text=_("new_bookmark_name"))
        self.new_bookmark_entry.grid(row=0, column=0, sticky="ew", padx=(0, 5))
        self.new_bookmark_entry.bind("<Return>", lambda e: self._handle_add_bookmark())

        ctk.CTkButton(add_frame, text=_("add"), width=60, command=self._handle_add_bookmark).grid(row=0, column=1)

    def _setup_footer(self) -> None:
        """Set up the footer/status bar."""
        footer = ctk.CTkFrame(self, height=30, corner_radius=0)
        footer.grid(row=2, column=0, sticky="ew")
        footer.grid_columnconfigure(0, weight=1)

        self.status_label = ctk.CTkLabel(
            footer,
            text=_("opening_settings"),
            font=ctk.CTkFont(size=11),
            text_color="gray",
        )
        self.status_label.grid(row=0, column=0, padx=10, pady=5, sticky="w")

        self.mode_label = ctk.CTkLabel(
            footer,
            text="",
            font=ctk.CTkFont(size=11),
            text_color="gray",
        )
        self.mode_label.grid(row=0, column=1, padx=10, pady=5, sticky="e")

    def _bind_events(self) -> None:
        """Bind window events."""
        self.protocol("WM_DELETE_WINDOW", self._handle_close)

    def _handle_close(self) -> None:
        """Handle window close event."""
        self.app.preferences.update(window_width=self.winfo_width(), window_height=self.winfo_height())

        if self._on_close:
            self._on_close()
        else:
            self.destroy()

    def _apply_view(self) -> None:
        try:
            scale, tx, ty, tz = (float(self._view_entries[k].get()) for k in ("scale", "tx", "ty", "tz"))
        except ValueError:
            self.set_status(_("invalid_number"))
            return

        self.app.viewer_state.update(transform=(
            scale, 0.0, 0.0, tx,
            0.0, scale, 0.0, ty,
            0.0, 0.0, scale, tz,
        ))

    def _apply_contrast(self) -> None:
        source = self._contrast_entries["source"].get().strip() or DEFAULT_SOURCE
        try:
            low = float(self._contrast_entries["min"].get())
            high = float(self._contrast_entries["max"].get())
            self.app.viewer_state.set_display(source, min=low, max=high)
        except ValueError as e:
            logger.warning(f"Rejected contrast range: {e}")
            self.set_status(_("invalid_range"))
            return

        self.app.viewer_state.update(current_source=source)

    def _handle_add_bookmark(self) -> None:
        name = self.new_bookmark_entry.get().strip()
        if not name:
            return
        self.app.viewer_state.add_bookmark(name)
        self.new_bookmark_entry.delete(0, "end")

    def _handle_go_to_bookmark(self, name: str) -> None:
        transform = self.app.viewer_state.state.bookmarks.get(name)
        if transform is not None:
            self.app.viewer_state.update(transform=transform)

    def _handle_remove_bookmark(self, name: str) -> None:
        self.app.viewer_state.remove_bookmark(name)

    def _show_preferences(self) -> None:
        PreferencesDialog(self, self.app.preferences)

    def _toggle_theme(self) -> None:
        """Toggle between light and dark theme."""
        theme = "light" if ctk.get_appearance_mode().lower() == "dark" else "dark"
        ctk.set_appearance_mode(theme)
        self.app.preferences.update(theme=theme)

    def refresh_state(self, state: ViewerState) -> None:
        """Show a viewer state in the panels.

        Args:
            state: The state to display
        """
        t = state.transform
        for field_name, value in (("scale", t[0]), ("tx", t[3]), ("ty", t[7]), ("tz", t[11])):
            entry = self._view_entries[field_name]
            entry.delete(0, "end")
            entry.insert(0, f"{value:g}")

        source = state.current_source or DEFAULT_SOURCE
        display = state.display.get(source, DisplaySettings())
        for field_name, value in (("source", source), ("min", f"{display.min:g}"), ("max", f"{display.max:g}")):
            entry = self._contrast_entries[field_name]
            entry.delete(0, "end")
            entry.insert(0, value)

        self.bookmark_list.set_bookmarks(sorted(state.bookmarks))

    def set_locator(self, uri: str) -> None:
        """Show the settings locator in the header."""
        self.locator_label.configure(text=uri)

    def set_result(self, result: InitResult) -> None:
        """Show how the settings were opened.

        Args:
            result: The initialization result
        """
        self.mode_label.configure(text=_("mode_read_only") if result.is_read_only else _("mode_autosave"))
        self.set_status(_(f"result_{result.value}"))

    def set_status(self, message: str) -> None:
        """Set the status bar message.

        Args:
            message: The status message to display
        """
        self.status_label.configure(text=message)
