"""Dialog windows."""

from .confirm_dialog import ConfirmDialog, GuiConfirmPrompt
from .preferences_dialog import PreferencesDialog

__all__ = ["ConfirmDialog", "GuiConfirmPrompt", "PreferencesDialog"]
