"""
rules.py - Renaming Rules

Each rule is a pure function of (text, parameters). The parameter
dataclass selects the rule: apply_rule dispatches on its `kind`.

Rules:
- Search & Replace
- Insert / Overwrite
- Insert Date/Time
- Remove Characters
- Change Case
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Union, List
import logging
import re

from .errors import InvalidFormat, InvalidParameters, MissingMetadata
from .models_fs import FileEntry
from .text_match import compile_pattern, replace_text
from .text_position import insert_text, overwrite_text, remove_range

logger = logging.getLogger(__name__)


class RuleKind(Enum):
    """Rule kinds"""
    REPLACE = "replace"
    INSERT_OVERWRITE = "insert"
    DATE_TIME = "datetime"
    REMOVE_CHARACTERS = "remove"
    CHANGE_CASE = "case"

    @property
    def label(self) -> str:
        return _RULE_LABELS[self]


_RULE_LABELS = {
    RuleKind.REPLACE: "Search & Replace",
    RuleKind.INSERT_OVERWRITE: "Insert / Overwrite",
    RuleKind.DATE_TIME: "Insert Date/Time",
    RuleKind.REMOVE_CHARACTERS: "Remove Characters",
    RuleKind.CHANGE_CASE: "Uppercase / lowercase",
}


class InsertMode(Enum):
    INSERT = "insert"
    OVERWRITE = "overwrite"


class TimeSource(Enum):
    """Where the Insert Date/Time rule takes its timestamp from"""
    NOW = "now"                          # Current time, shared by the whole batch
    FILE_METADATA = "metadata"           # Capture time supplied with the file (e.g. EXIF)
    MODIFIED = "modified"                # Modification time from the scan
    ACCESSED = "accessed"                # Access time from the scan


class CaseMode(Enum):
    UPPER = "upper"
    LOWER = "lower"
    TITLE = "title"
    SENTENCE = "sentence"
    SNAKE = "snake"
    KEBAB = "kebab"
    CAMEL = "camel"                  # UpperCamel
    SHOUTY_SNAKE = "shouty_snake"
    MIXED = "mixed"                  # lowerCamel


@dataclass(frozen=True)
class ReplaceParams:
    kind: ClassVar[RuleKind] = RuleKind.REPLACE
    pattern: str
    replacement: str = ""
    use_regex: bool = False
    case_sensitive: bool = True


@dataclass(frozen=True)
class InsertOverwriteParams:
    kind: ClassVar[RuleKind] = RuleKind.INSERT_OVERWRITE
    text: str
    offset: int = 0
    mode: InsertMode = InsertMode.INSERT


@dataclass(frozen=True)
class DateTimeParams:
    kind: ClassVar[RuleKind] = RuleKind.DATE_TIME
    format: str = "%Y-%m-%d"
    source: TimeSource = TimeSource.NOW
    offset: int = 0
    mode: InsertMode = InsertMode.INSERT


@dataclass(frozen=True)
class RemoveCharactersParams:
    kind: ClassVar[RuleKind] = RuleKind.REMOVE_CHARACTERS
    start: int = 0
    end: int = 0


@dataclass(frozen=True)
class ChangeCaseParams:
    kind: ClassVar[RuleKind] = RuleKind.CHANGE_CASE
    mode: CaseMode = CaseMode.LOWER


RuleParameters = Union[
    ReplaceParams,
    InsertOverwriteParams,
    DateTimeParams,
    RemoveCharactersParams,
    ChangeCaseParams,
]


@dataclass(frozen=True)
class RuleContext:
    """Per-file inputs of a rule besides the text itself"""
    now: datetime = field(default_factory=datetime.now)
    entry: Optional[FileEntry] = None


# Fixed sample used to try a format template before touching any file
_FORMAT_PROBE = datetime(2000, 1, 2, 3, 4, 5)


def validate_params(params: RuleParameters) -> None:
    """
    Check parameters that would fail for every file

    Args:
        params: Rule parameters

    Raises:
        InvalidParameters: Parameters cannot be applied
    """
    if isinstance(params, ReplaceParams):
        compile_pattern(params.pattern, params.use_regex, params.case_sensitive)
        if params.use_regex:
            # Surfaces bad group references in the replacement template
            replace_text("", params.pattern, params.replacement,
                         params.use_regex, params.case_sensitive)
    elif isinstance(params, DateTimeParams):
        format_timestamp(_FORMAT_PROBE, params.format)
    elif not isinstance(params, (InsertOverwriteParams, RemoveCharactersParams, ChangeCaseParams)):
        raise InvalidParameters(f"Unknown rule parameters: {params!r}")


def apply_rule(text: str, params: RuleParameters, context: Optional[RuleContext] = None) -> str:
    """
    Apply rule to one field

    Args:
        text: Field text (stem, extension or whole name)
        params: Rule parameters, selects the rule
        context: Current time and file information (Insert Date/Time)

    Returns:
        Transformed text

    Raises:
        InvalidParameters: Parameters unusable for any file
        MissingMetadata: Requested timestamp unavailable for this file
    """
    kind = getattr(params, "kind", None)
    if kind == RuleKind.REPLACE:
        return replace_text(text, params.pattern, params.replacement,
                            params.use_regex, params.case_sensitive)
    if kind == RuleKind.INSERT_OVERWRITE:
        return insert_or_overwrite(text, params.text, params.offset, params.mode)
    if kind == RuleKind.DATE_TIME:
        return apply_date_time(text, params, context or RuleContext())
    if kind == RuleKind.REMOVE_CHARACTERS:
        return remove_range(text, params.start, params.end)
    if kind == RuleKind.CHANGE_CASE:
        return change_case(text, params.mode)
    raise InvalidParameters(f"Unknown rule parameters: {params!r}")


def insert_or_overwrite(text: str, insertion: str, offset: int, mode: InsertMode) -> str:
    """Insert or overwrite at signed offset"""
    if mode == InsertMode.OVERWRITE:
        return overwrite_text(text, insertion, offset)
    return insert_text(text, insertion, offset)


def format_timestamp(when: datetime, template: str) -> str:
    """
    Format timestamp with strftime template

    Raises:
        InvalidFormat: Template is empty or rejected by strftime
    """
    if not template:
        raise InvalidFormat(template, "format cannot be empty")
    try:
        return when.strftime(template)
    except (ValueError, UnicodeError) as e:
        raise InvalidFormat(template, str(e)) from e


def timestamp_for(source: TimeSource, context: RuleContext) -> datetime:
    """
    Pick the timestamp for one file

    Raises:
        MissingMetadata: The file has no such timestamp
    """
    if source == TimeSource.NOW:
        return context.now

    entry = context.entry
    name = entry.name if entry else "<unknown>"
    if source == TimeSource.FILE_METADATA:
        if entry is None or entry.captured_at is None:
            raise MissingMetadata(name, "capture")
        return entry.captured_at

    value = None
    if entry is not None:
        value = entry.mtime if source == TimeSource.MODIFIED else entry.atime
    if value is None:
        raise MissingMetadata(name, source.value)
    return datetime.fromtimestamp(value)


def apply_date_time(text: str, params: DateTimeParams, context: RuleContext) -> str:
    """Format the selected timestamp and place it in text"""
    when = timestamp_for(params.source, context)
    formatted = format_timestamp(when, params.format)
    return insert_or_overwrite(text, formatted, params.offset, params.mode)


# Alphanumeric runs; `_` is excluded so it acts as a separator
_WORD_RE = re.compile(r"[^\W_]+")
_HUMP_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def split_words(text: str) -> List[str]:
    """Split into words at separators and at lower-to-upper humps"""
    words = []
    for run in _WORD_RE.findall(text):
        words.extend(_HUMP_RE.sub(" ", run).split())
    return words


def change_case(text: str, mode: CaseMode) -> str:
    """
    Convert case of text

    Title case capitalizes every alphanumeric run and keeps separators as
    they are, so "my_file-name" becomes "My_File-Name".
    """
    if mode == CaseMode.UPPER:
        return text.upper()
    if mode == CaseMode.LOWER:
        return text.lower()
    if mode == CaseMode.TITLE:
        return _WORD_RE.sub(lambda m: _capitalize(m.group(0)), text)
    if mode == CaseMode.SENTENCE:
        lowered = text.lower()
        m = _WORD_RE.search(lowered)
        if not m:
            return lowered
        i = m.start()
        return lowered[:i] + lowered[i].upper() + lowered[i + 1:]
    if mode == CaseMode.SNAKE:
        return "_".join(w.lower() for w in split_words(text))
    if mode == CaseMode.KEBAB:
        return "-".join(w.lower() for w in split_words(text))
    if mode == CaseMode.CAMEL:
        return "".join(_capitalize(w) for w in split_words(text))
    if mode == CaseMode.SHOUTY_SNAKE:
        return "_".join(w.upper() for w in split_words(text))
    if mode == CaseMode.MIXED:
        words = split_words(text)
        return "".join(w.lower() if i == 0 else _capitalize(w) for i, w in enumerate(words))
    raise InvalidParameters(f"Unknown case mode: {mode!r}")
