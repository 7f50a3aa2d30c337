"""
safety_checks.py - Safety Check Module

Checks run right before a file is touched
"""

from pathlib import Path
from typing import Tuple, Optional
import os
import platform

from .text_match import is_valid_filename


def check_writable(directory: Path) -> Tuple[bool, Optional[str]]:
    """
    Check if entries can be created/removed in a directory

    Args:
        directory: Directory to check

    Returns:
        (is_writable, error_reason)
    """
    if not directory.exists():
        return False, f"Directory does not exist: {directory}"
    if not os.access(directory, os.W_OK):
        return False, f"Directory is not writable: {directory}"
    return True, None


def check_path_length(path: Path, max_length: int = 260) -> Tuple[bool, Optional[str]]:
    """
    Check if path length exceeds limit (mainly for Windows)

    Args:
        path: Path to check
        max_length: Maximum length

    Returns:
        (is_valid, error_reason)
    """
    path_str = str(path)
    if len(path_str) > max_length:
        return False, f"Path length ({len(path_str)}) exceeds limit ({max_length}): {path}"
    return True, None


def check_rename_op(src: Path, dst: Path) -> Tuple[bool, Optional[str]]:
    """
    Check if a single rename operation is safe

    Args:
        src: Source path
        dst: Destination path

    Returns:
        (is_safe, error_reason)
    """
    if not src.exists():
        return False, f"Source file does not exist: {src}"

    if not src.is_file():
        return False, f"Source path is not a file: {src}"

    valid, error = is_valid_filename(dst.name)
    if not valid:
        return False, error

    if platform.system() == "Windows":
        valid, error = check_path_length(dst)
        if not valid:
            return False, error

    return check_writable(src.parent)
