"""
core - Bulk Renamer Core Module

Provides the renaming rules, preview, conflict resolution and execution.
"""

from .models_fs import (
    FileName,
    FileEntry,
    Field,
    RenameEntry,
    ConflictVerdict,
    VerdictKind,
    RenamePlan,
    RenameOptions,
    SortKey,
    DEFAULT_IGNORE_DIRS,
    split_file_name,
)

from .errors import (
    RenameToolError,
    RuleError,
    InvalidParameters,
    InvalidPattern,
    InvalidFormat,
    MissingMetadata,
    PlanBlocked,
)

from .rules import (
    RuleKind,
    InsertMode,
    TimeSource,
    CaseMode,
    ReplaceParams,
    InsertOverwriteParams,
    DateTimeParams,
    RemoveCharactersParams,
    ChangeCaseParams,
    RuleContext,
    apply_rule,
    validate_params,
)

from .field_select import select_and_recombine

from .scan_files import (
    scan_recursive,
    scan_directory,
    entries_from_paths,
    existing_paths_for,
)

from .sort_rules import sort_files

from .plan_rename import (
    compute_preview,
    resolve_conflicts,
    is_plan_executable,
    build_plan,
    ConflictResolver,
    PreviewSession,
    PreviewState,
)

from .exec_rename import (
    execute_rename,
    EntryOutcome,
    RenameResult,
    load_undo_plan,
    cleanup_temp_files,
)

__all__ = [
    # Data models
    "FileName",
    "FileEntry",
    "Field",
    "RenameEntry",
    "ConflictVerdict",
    "VerdictKind",
    "RenamePlan",
    "RenameOptions",
    "SortKey",
    "DEFAULT_IGNORE_DIRS",
    "split_file_name",

    # Errors
    "RenameToolError",
    "RuleError",
    "InvalidParameters",
    "InvalidPattern",
    "InvalidFormat",
    "MissingMetadata",
    "PlanBlocked",

    # Rules
    "RuleKind",
    "InsertMode",
    "TimeSource",
    "CaseMode",
    "ReplaceParams",
    "InsertOverwriteParams",
    "DateTimeParams",
    "RemoveCharactersParams",
    "ChangeCaseParams",
    "RuleContext",
    "apply_rule",
    "validate_params",
    "select_and_recombine",

    # Scanning
    "scan_recursive",
    "scan_directory",
    "entries_from_paths",
    "existing_paths_for",
    "sort_files",

    # Planning
    "compute_preview",
    "resolve_conflicts",
    "is_plan_executable",
    "build_plan",
    "ConflictResolver",
    "PreviewSession",
    "PreviewState",

    # Execution
    "execute_rename",
    "EntryOutcome",
    "RenameResult",
    "load_undo_plan",
    "cleanup_temp_files",
]
