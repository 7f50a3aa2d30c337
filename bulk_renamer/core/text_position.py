"""
text_position.py - Character Position Tools

Offsets are character indices into a str (not bytes). A non-negative
offset counts from the front and is clamped to the text length. A negative
offset -n counts from the back and resolves to len - n, clamped to 0; so -1
addresses the position before the last character.
"""


def resolve_offset(length: int, offset: int) -> int:
    """
    Resolve signed offset to an index in [0, length]

    Args:
        length: Text length in characters
        offset: Signed offset

    Returns:
        Index
    """
    if offset < 0:
        return max(length + offset, 0)
    return min(offset, length)


def insert_text(text: str, insertion: str, offset: int) -> str:
    """
    Insert string at offset, existing characters shift right

    Args:
        text: Original text
        insertion: Text to insert
        offset: Signed offset

    Returns:
        New text
    """
    idx = resolve_offset(len(text), offset)
    return text[:idx] + insertion + text[idx:]


def overwrite_text(text: str, insertion: str, offset: int) -> str:
    """
    Overwrite characters starting at offset

    Characters past the end of text are appended; an offset past the end
    is a plain append.

    Args:
        text: Original text
        insertion: Replacement characters
        offset: Signed offset

    Returns:
        New text
    """
    idx = resolve_offset(len(text), offset)
    return text[:idx] + insertion + text[idx + len(insertion):]


def remove_range(text: str, start: int, end: int) -> str:
    """
    Remove characters in half-open range [start, end)

    Args:
        text: Original text
        start: Signed start offset
        end: Signed end offset (clamped to length)

    Returns:
        New text, unchanged if the range is empty
    """
    length = len(text)
    if start >= length:
        return text

    lo = resolve_offset(length, start)
    hi = resolve_offset(length, end)
    if lo >= hi:
        return text
    return text[:lo] + text[hi:]
