"""
text_match.py - Text Matching Tools

Provides string matching, replacement and filename validation
"""

from typing import Optional, Pattern
import platform
import re

from .errors import InvalidPattern


def contains(text: str, keyword: str, case_sensitive: bool = True) -> bool:
    """
    Check if text contains keyword

    Args:
        text: Text to check
        keyword: Keyword
        case_sensitive: Whether case-sensitive

    Returns:
        Whether contains
    """
    if not keyword:
        return True

    if case_sensitive:
        return keyword in text
    else:
        return keyword.casefold() in text.casefold()


def compile_pattern(pattern: str, use_regex: bool = False, case_sensitive: bool = True) -> Pattern:
    """
    Compile search pattern

    Args:
        pattern: Literal text or regular expression
        use_regex: Whether pattern is a regular expression
        case_sensitive: Whether case-sensitive

    Returns:
        Compiled pattern

    Raises:
        InvalidPattern: Pattern is empty or not a valid expression
    """
    if not pattern:
        raise InvalidPattern(pattern, "pattern cannot be empty")

    flags = 0 if case_sensitive else re.IGNORECASE
    source = pattern if use_regex else re.escape(pattern)
    try:
        return re.compile(source, flags)
    except re.error as e:
        raise InvalidPattern(pattern, str(e)) from e


def replace_text(
    text: str,
    pattern: str,
    replacement: str,
    use_regex: bool = False,
    case_sensitive: bool = True,
    compiled: Optional[Pattern] = None,
) -> str:
    """
    Replace all non-overlapping matches, left to right

    Args:
        text: Original text
        pattern: String or expression to replace
        replacement: Replacement (may reference groups when use_regex)
        use_regex: Whether pattern is a regular expression
        case_sensitive: Whether case-sensitive
        compiled: Precompiled pattern, skips compilation

    Returns:
        Replaced text

    Raises:
        InvalidPattern: Bad pattern or bad group reference in replacement
    """
    if compiled is None:
        compiled = compile_pattern(pattern, use_regex, case_sensitive)

    if not use_regex:
        # Literal replacement, no template expansion
        return compiled.sub(lambda m: replacement, text)

    try:
        return compiled.sub(replacement, text)
    except (re.error, IndexError) as e:
        raise InvalidPattern(pattern, f"bad replacement {replacement!r}: {e}") from e


def is_valid_filename(name: str, windows: Optional[bool] = None) -> tuple[bool, Optional[str]]:
    """
    Check if filename is valid (portable across Windows and POSIX)

    A trailing space or dot is only rejected on Windows, which strips them
    silently; elsewhere "name." is a distinct, valid filename.

    Args:
        name: Filename
        windows: Apply Windows-only rules (default: current platform)

    Returns:
        (is_valid, error_reason)
    """
    if not name:
        return False, "Filename cannot be empty"

    if name in (".", ".."):
        return False, f"Filename cannot be {name}"

    # Windows invalid characters
    invalid_chars = '<>:"/\\|?*\0'
    for char in invalid_chars:
        if char in name:
            return False, f"Filename contains invalid character: {char!r}"

    if windows is None:
        windows = platform.system() == "Windows"

    # Trailing space or dot
    if windows and (name.endswith(' ') or name.endswith('.')):
        return False, "Filename cannot end with space or dot"

    # Windows reserved names
    reserved_names = {
        'CON', 'PRN', 'AUX', 'NUL',
        'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
        'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
    }
    name_upper = name.upper().split('.')[0]
    if name_upper in reserved_names:
        return False, f"Filename is a Windows reserved name: {name_upper}"

    if len(name) > 255:
        return False, "Filename exceeds 255 characters"

    return True, None
