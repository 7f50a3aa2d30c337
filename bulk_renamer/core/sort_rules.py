"""
sort_rules.py - Sorting Rules Module

Orders the file list before the preview assigns ordinals
"""

from typing import List, Callable
from .models_fs import FileEntry, SortKey


def get_sort_key(sort_by: SortKey) -> Callable[[FileEntry], tuple]:
    """
    Get sort key function

    Args:
        sort_by: Sorting method

    Returns:
        Sort key function
    """
    if sort_by == SortKey.MTIME:
        return lambda f: (f.mtime or 0.0, f.name.lower())
    elif sort_by == SortKey.SIZE:
        return lambda f: (f.size, f.name.lower())
    elif sort_by == SortKey.CTIME:
        return lambda f: (f.ctime or 0.0, f.name.lower())
    else:
        return lambda f: (f.name.lower(), f.name)


def sort_files(
    files: List[FileEntry],
    sort_by: SortKey = SortKey.NAME,
    reverse: bool = False
) -> List[FileEntry]:
    """
    Sort file list

    Args:
        files: File list
        sort_by: Sorting method
        reverse: Whether to sort in reverse

    Returns:
        Sorted file list (new list)
    """
    return sorted(files, key=get_sort_key(sort_by), reverse=reverse)
