"""
scan_files.py - File Scanning Module

Provides the file list the rules work on: recursive or single-directory
scans, or wrapping paths chosen elsewhere.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set
import logging
import os

from .models_fs import DEFAULT_IGNORE_DIRS, FileEntry
from .text_match import contains

logger = logging.getLogger(__name__)


def scan_recursive(
    root: Path,
    keyword: str = "",
    case_sensitive: bool = True,
    include_hidden: bool = False,
    ignore_dirs: Optional[List[str]] = None,
    captured: Optional[Dict[Path, datetime]] = None,
    progress_callback: Optional[Callable[[str], None]] = None
) -> List[FileEntry]:
    """
    Recursively scan folder for files containing keyword

    Args:
        root: Root directory
        keyword: Search keyword (empty string means match all)
        case_sensitive: Whether case-sensitive
        include_hidden: Whether to include hidden files
        ignore_dirs: List of directories to ignore
        captured: Capture timestamps by path, read by the caller
        progress_callback: Progress callback function

    Returns:
        List of matched files, sorted by path
    """
    if ignore_dirs is None:
        ignore_dirs = DEFAULT_IGNORE_DIRS

    root = Path(root).resolve()
    if not root.is_dir():
        raise ValueError(f"Directory does not exist: {root}")

    captured = captured or {}
    results: List[FileEntry] = []

    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)

        # Modifying dirnames in place keeps os.walk out of these directories
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in ignore_dirs and (include_hidden or not d.startswith('.'))
        )

        for filename in sorted(filenames):
            if not include_hidden and filename.startswith('.'):
                continue

            if keyword and not contains(filename, keyword, case_sensitive):
                continue

            filepath = current_dir / filename
            if progress_callback:
                progress_callback(str(filepath))

            try:
                results.append(FileEntry.from_path(filepath, captured.get(filepath)))
            except OSError as e:
                logger.warning("Cannot access %s: %s", filepath, e)

    return results


def scan_directory(
    directory: Path,
    suffix_filter: Optional[str] = None,
    include_hidden: bool = False,
    captured: Optional[Dict[Path, datetime]] = None,
) -> List[FileEntry]:
    """
    Scan single directory (non-recursive)

    Args:
        directory: Target directory
        suffix_filter: Suffix filter (e.g., ".jpg", must include dot)
        include_hidden: Whether to include hidden files
        captured: Capture timestamps by path, read by the caller

    Returns:
        File list, sorted by name
    """
    directory = Path(directory).resolve()
    if not directory.is_dir():
        raise ValueError(f"Directory does not exist: {directory}")

    captured = captured or {}
    results: List[FileEntry] = []

    for item in sorted(directory.iterdir()):
        # Only process files, not directories
        if not item.is_file():
            continue

        if not include_hidden and item.name.startswith('.'):
            continue

        if suffix_filter and item.suffix.lower() != suffix_filter.lower():
            continue

        try:
            results.append(FileEntry.from_path(item, captured.get(item)))
        except OSError as e:
            logger.warning("Cannot access %s: %s", item, e)

    return results


def entries_from_paths(
    paths: Iterable[Path],
    captured: Optional[Dict[Path, datetime]] = None,
) -> List[FileEntry]:
    """
    Build entries for paths chosen elsewhere, keeping their order

    Directories and missing paths are skipped.

    Args:
        paths: File paths
        captured: Capture timestamps by path, read by the caller

    Returns:
        File list
    """
    captured = captured or {}
    results: List[FileEntry] = []
    for p in paths:
        p = Path(p).resolve()
        if not p.is_file():
            logger.debug("Skipping non-file %s", p)
            continue
        results.append(FileEntry.from_path(p, captured.get(p)))
    return results


def existing_paths_for(entries: Iterable[FileEntry]) -> Set[Path]:
    """
    Get every path currently present in the directories of the entries

    Args:
        entries: Files of the batch

    Returns:
        Path set (files and directories, since both block a rename target)
    """
    paths: Set[Path] = set()
    for directory in {e.directory for e in entries}:
        try:
            paths.update(directory.iterdir())
        except OSError as e:
            logger.warning("Cannot list %s: %s", directory, e)
    return paths
