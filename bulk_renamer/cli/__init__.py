"""
cli - Command Line Interface for Bulk Renamer
"""

from .cli_entry import main

__all__ = ["main"]
