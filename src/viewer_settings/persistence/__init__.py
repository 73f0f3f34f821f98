"""Remote settings persistence."""

from .manager import (
    AlreadyInitializedError,
    ConfirmPrompt,
    InitResult,
    ManagerState,
    SettingsPersistenceManager,
    always,
)
from .scheduler import RepeatingTimer
from .staging import download_settings, staged_document, upload_settings

__all__ = [
    "AlreadyInitializedError",
    "ConfirmPrompt",
    "InitResult",
    "ManagerState",
    "SettingsPersistenceManager",
    "always",
    "RepeatingTimer",
    "download_settings",
    "staged_document",
    "upload_settings",
]
