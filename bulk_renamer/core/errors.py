"""
errors.py - Exception Types

Parameter errors (InvalidParameters and subclasses) abort a preview
recompute. MissingMetadata only concerns a single file.
"""

from typing import List, Optional


class RenameToolError(Exception):
    """Base class for all rename tool errors"""


class RuleError(RenameToolError):
    """A rule could not be applied"""


class InvalidParameters(RuleError):
    """Rule parameters are unusable for every file"""


class InvalidPattern(InvalidParameters):
    """Empty or malformed search pattern / replacement template"""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class InvalidFormat(InvalidParameters):
    """Unusable date/time format template"""

    def __init__(self, template: str, reason: str):
        super().__init__(f"Invalid format {template!r}: {reason}")
        self.template = template
        self.reason = reason


class MissingMetadata(RuleError):
    """Requested per-file timestamp is not available"""

    def __init__(self, name: str, source: str):
        super().__init__(f"No {source} timestamp for {name}")
        self.name = name
        self.source = source


class PlanBlocked(RenameToolError):
    """Execution refused because some entries conflict"""

    def __init__(self, blocked: List[int], message: Optional[str] = None):
        super().__init__(message or f"{len(blocked)} entries block the rename plan")
        self.blocked = blocked
