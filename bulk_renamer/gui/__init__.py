"""
gui - PySide6 shell for Bulk Renamer
"""

from .gui_entry import main

__all__ = ["main"]
