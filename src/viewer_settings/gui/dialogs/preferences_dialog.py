"""Preferences dialog for configuring the application."""

import customtkinter as ctk
from typing import Optional, Callable
import logging

from ...i18n import _, get_available_languages, get_language
from ...storage.preferences import PreferencesManager, clamp_autosave_interval

logger = logging.getLogger(__name__)


class PreferencesDialog(ctk.CTkToplevel):
    """Preferences dialog window."""

    def __init__(
        self,
        parent,
        preferences_manager: PreferencesManager,
        on_save: Optional[Callable] = None,
        **kwargs,
    ):
        super().__init__(parent, **kwargs)

        self.preferences_manager = preferences_manager
        self._on_save = on_save

        self.title(_("preferences_title"))
        self.geometry("480x460")
        self.resizable(False, False)

        # Make modal
        self.transient(parent)
        self.grab_set()

        self._preferences = preferences_manager.load()

        self._setup_ui()

        # Center on parent
        self.update_idletasks()
        x = parent.winfo_x() + (parent.winfo_width() - self.winfo_width()) // 2
        y = parent.winfo_y() + (parent.winfo_height() - self.winfo_height()) // 2
        self.geometry(f"+{x}+{y}")

    def _setup_ui(self) -> None:
        """Set up the dialog UI."""
        self._setup_language_section()
        self._setup_theme_section()
        self._setup_saving_section()

        button_frame = ctk.CTkFrame(self, fg_color="transparent")
        button_frame.pack(fill="x", padx=10, pady=10)

        ctk.CTkButton(
            button_frame,
            text=_("cancel"),
            width=100,
            fg_color=("gray70", "gray30"),
            command=self.destroy,
        ).pack(side="right", padx=5)

        ctk.CTkButton(
            button_frame,
            text=_("save"),
            width=100,
            command=self._save_preferences,
        ).pack(side="right", padx=5)

    def _section(self, title_key: str) -> ctk.CTkFrame:
        frame = ctk.CTkFrame(self)
        frame.pack(fill="x", padx=10, pady=(10, 0))
        ctk.CTkLabel(
            frame,
            text=_(title_key),
            font=ctk.CTkFont(size=14, weight="bold"),
        ).pack(anchor="w", padx=10, pady=(10, 5))
        return frame

    def _setup_language_section(self) -> None:
        frame = self._section("language")

        available_langs = get_available_languages()
        current_lang = self._preferences.language or get_language()
        current_name = dict(available_langs).get(current_lang, "English")

        options = ctk.CTkFrame(frame, fg_color="transparent")
        options.pack(fill="x", padx=10, pady=(0, 10))

        self.language_var = ctk.StringVar(value=current_name)
        ctk.CTkOptionMenu(
            options,
            variable=self.language_var,
            values=[name for _code, name in available_langs],
            width=200,
        ).pack(side="left", padx=(0, 10))

        ctk.CTkLabel(
            options,
            text=_("language_restart_note"),
            font=ctk.CTkFont(size=11),
            text_color="gray",
        ).pack(side="left")

        self._lang_map = {name: code for code, name in available_langs}

    def _setup_theme_section(self) -> None:
        frame = self._section("theme")

        self.theme_var = ctk.StringVar(value=self._preferences.theme)
        options = ctk.CTkFrame(frame, fg_color="transparent")
        options.pack(fill="x", padx=10, pady=(0, 10))

        for value, label_key in [("dark", "theme_dark"), ("light", "theme_light"), ("system", "theme_system")]:
            ctk.CTkRadioButton(
                options,
                text=_(label_key),
                variable=self.theme_var,
                value=value,
            ).pack(side="left", padx=10)

    def _setup_saving_section(self) -> None:
        frame = self._section("saving")

        interval_frame = ctk.CTkFrame(frame, fg_color="transparent")
        interval_frame.pack(fill="x", padx=10, pady=5)
        ctk.CTkLabel(interval_frame, text=_("autosave_interval")).pack(side="left")
        self.interval_entry = ctk.CTkEntry(interval_frame, width=80)
        self.interval_entry.pack(side="left", padx=5)
        self.interval_entry.insert(0, str(self._preferences.autosave_interval))

        self.read_only_var = ctk.BooleanVar(value=self._preferences.open_read_only)
        ctk.CTkCheckBox(
            frame,
            text=_("open_read_only_default"),
            variable=self.read_only_var,
        ).pack(anchor="w", padx=10, pady=(5, 10))

    def _save_preferences(self) -> None:
        """Save all preferences and close dialog."""
        self._preferences.language = self._lang_map.get(self.language_var.get(), "en")
        self._preferences.theme = self.theme_var.get()
        self._preferences.autosave_interval = clamp_autosave_interval(self.interval_entry.get())
        self._preferences.open_read_only = self.read_only_var.get()

        self.preferences_manager.save(self._preferences)

        # Apply theme immediately
        ctk.set_appearance_mode(self._preferences.theme)

        if self._on_save:
            self._on_save(self._preferences)

        self.destroy()
