"""Graphical user interface."""
