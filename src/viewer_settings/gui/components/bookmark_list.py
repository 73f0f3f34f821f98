"""Scrollable bookmark list component."""

import customtkinter as ctk
from typing import Callable, Optional
import logging

from ...i18n import _

logger = logging.getLogger(__name__)


class BookmarkList(ctk.CTkScrollableFrame):
    """A scrollable list of named view bookmarks."""

    def __init__(
        self,
        parent,
        on_go: Optional[Callable[[str], None]] = None,
        on_remove: Optional[Callable[[str], None]] = None,
        **kwargs,
    ):
        """Initialize the bookmark list.

        Args:
            parent: Parent widget
            on_go: Callback when a bookmark is activated
            on_remove: Callback when a bookmark is removed
            **kwargs: Additional arguments for CTkScrollableFrame
        """
        super().__init__(parent, **kwargs)

        self._on_go = on_go
        self._on_remove = on_remove
        self._rows: dict[str, ctk.CTkFrame] = {}

        self.grid_columnconfigure(0, weight=1)

        self._empty_label = ctk.CTkLabel(
            self,
            text=_("no_bookmarks"),
            font=ctk.CTkFont(size=13),
            text_color="gray",
        )
        self._empty_label.grid(row=0, column=0, pady=30)

    def set_bookmarks(self, names: list[str]) -> None:
        """Show exactly the given bookmarks, in order.

        Args:
            names: Bookmark names
        """
        for row in self._rows.values():
            row.destroy()
        self._rows.clear()

        if not names:
            self._empty_label.grid(row=0, column=0, pady=30)
            return

        self._empty_label.grid_forget()
        for index, name in enumerate(names):
            self._rows[name] = self._create_row(name)
            self._rows[name].grid(row=index, column=0, sticky="ew", pady=3, padx=3)

    def _create_row(self, name: str) -> ctk.CTkFrame:
        row = ctk.CTkFrame(self)
        row.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(row, text=name, anchor="w").grid(row=0, column=0, padx=10, pady=5, sticky="ew")

        ctk.CTkButton(
            row,
            text=_("go"),
            width=50,
            command=lambda n=name: self._on_go and self._on_go(n),
        ).grid(row=0, column=1, padx=5, pady=5)

        ctk.CTkButton(
            row,
            text="✕",
            width=30,
            fg_color=("gray70", "gray30"),
            command=lambda n=name: self._on_remove and self._on_remove(n),
        ).grid(row=0, column=2, padx=(0, 5), pady=5)

        return row

    def __len__(self) -> int:
        """Get the number of bookmarks shown."""
        return len(self._rows)
