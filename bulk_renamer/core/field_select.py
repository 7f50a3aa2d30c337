"""
field_select.py - Field Selection

Applies a transform to the stem, the extension or the whole filename and
puts the name back together.
"""

from typing import Callable

from .models_fs import Field, FileName, split_file_name


def select_and_recombine(file_name: FileName, field: Field, transform: Callable[[str], str]) -> str:
    """
    Apply transform to the selected field

    Args:
        file_name: Original filename
        field: Field to transform
        transform: Text transformation

    Returns:
        New filename
    """
    if field == Field.ALL:
        return transform(file_name.value)

    stem, extension = split_file_name(file_name.value)

    if field == Field.NAME:
        new_stem = transform(stem)
        if extension is None:
            return new_stem
        return f"{new_stem}.{extension}"

    # Field.SUFFIX: a missing extension is an empty field, so one can be added
    new_extension = transform(extension or "")
    if new_extension:
        return f"{stem}.{new_extension}"
    if extension == "":
        # Keep a trailing dot that was already there
        return f"{stem}."
    return stem
