"""Viewer Settings Sync - keeps viewer session settings in remote storage."""

__version__ = "0.1.0"
