"""
Bulk Renamer - rule-based batch file renaming with live preview
"""

__version__ = "1.0.0"
