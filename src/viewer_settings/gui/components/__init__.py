"""Reusable GUI components."""

from .bookmark_list import BookmarkList

__all__ = ["BookmarkList"]
