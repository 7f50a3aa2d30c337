"""
cli_entry.py - CLI Entry Point

One subcommand per rule, plus `undo` for a saved result log.
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..core import (
    DEFAULT_IGNORE_DIRS, CaseMode, ChangeCaseParams, DateTimeParams, Field, FileEntry, InsertMode,
    InsertOverwriteParams, PlanBlocked, PreviewSession, PreviewState,
    RemoveCharactersParams, RenameOptions, ReplaceParams, SortKey, TimeSource,
    execute_rename, load_undo_plan, scan_directory, scan_recursive, sort_files,
)
from ..core.rules import RuleParameters

logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 50


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser"""
    parser = argparse.ArgumentParser(
        prog="bulk_renamer",
        description="Bulk Renamer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Replace text in the stem
  python -m bulk_renamer -c replace ./photos --pattern "IMG_" --replacement "holiday_"

  # Regular expression with groups, whole filename
  python -m bulk_renamer -c replace ./scans --regex --pattern "(\\d+)-(\\d+)" --replacement "\\2-\\1" --field all

  # Insert capture date in front of each stem
  python -m bulk_renamer -c datetime ./photos --source metadata --timestamps exif.json --format "%Y%m%d_"

  # Lowercase every extension
  python -m bulk_renamer -c case ./docs lower --field suffix

  # Undo a previous run
  python -m bulk_renamer -c undo .rename_backup/rename_result_20240101_120000_000000.json
"""
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only log errors")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("directory", type=str, help="Directory containing the files")
    common.add_argument("--field", type=str, default="name", choices=[f.value for f in Field],
                        help="Part of the filename to transform")
    common.add_argument("--recursive", "-R", action="store_true", help="Include subdirectories")
    common.add_argument("--keyword", "-k", type=str, default="", help="Only files whose name contains keyword")
    common.add_argument("--include-hidden", action="store_true", help="Include hidden files")
    common.add_argument("--ignore-dir", action="append", default=[], metavar="NAME",
                        help="Extra directory name to skip with --recursive (repeatable)")
    common.add_argument("--sort", type=str, default="name", choices=[k.value for k in SortKey],
                        help="Order of the file list")
    common.add_argument("--reverse", action="store_true", help="Reverse sort")
    common.add_argument("--dry-run", "-d", action="store_true", help="Preview only, do not execute")
    common.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")
    common.add_argument("--log-dir", type=str, default=None, help="Directory for plan/result logs")

    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    # replace subcommand
    replace_parser = subparsers.add_parser("replace", parents=[common], help="Search and replace")
    replace_parser.add_argument("--pattern", "-p", type=str, required=True, help="Text or expression to find")
    replace_parser.add_argument("--replacement", "-r", type=str, default="", help="Replacement text")
    replace_parser.add_argument("--regex", action="store_true", help="Pattern is a regular expression")
    replace_parser.add_argument("--ignore-case", "-i", action="store_true", help="Case-insensitive match")

    # insert subcommand
    insert_parser = subparsers.add_parser("insert", parents=[common], help="Insert or overwrite text")
    insert_parser.add_argument("text", type=str, help="Text to insert")
    insert_parser.add_argument("--offset", type=int, default=0,
                               help="Character offset, negative counts from the end")
    insert_parser.add_argument("--overwrite", action="store_true", help="Overwrite instead of insert")

    # datetime subcommand
    dt_parser = subparsers.add_parser("datetime", parents=[common], help="Insert date/time")
    dt_parser.add_argument("--format", "-f", type=str, default="%Y-%m-%d", help="strftime format")
    dt_parser.add_argument("--source", type=str, default="now", choices=[s.value for s in TimeSource],
                           help="Timestamp source")
    dt_parser.add_argument("--timestamps", type=str, default=None,
                           help="JSON file mapping filenames to ISO capture times (for --source metadata)")
    dt_parser.add_argument("--offset", type=int, default=0,
                           help="Character offset, negative counts from the end")
    dt_parser.add_argument("--overwrite", action="store_true", help="Overwrite instead of insert")

    # remove subcommand
    remove_parser = subparsers.add_parser("remove", parents=[common], help="Remove characters")
    remove_parser.add_argument("--start", type=int, default=0, help="First character to remove")
    remove_parser.add_argument("--end", type=int, required=True, help="Stop before this character")

    # case subcommand
    case_parser = subparsers.add_parser("case", parents=[common], help="Change case")
    case_parser.add_argument("mode", type=str, choices=[m.value for m in CaseMode], help="Case mode")

    # undo subcommand
    undo_parser = subparsers.add_parser("undo", help="Undo a run from its result log")
    undo_parser.add_argument("log_file", type=str, help="rename_result_*.json file")
    undo_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    return parser


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logger for console use"""
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def params_from_args(args) -> RuleParameters:
    """Build rule parameters from parsed arguments"""
    if args.command == "replace":
        return ReplaceParams(
            pattern=args.pattern,
            replacement=args.replacement,
            use_regex=args.regex,
            case_sensitive=not args.ignore_case,
        )
    if args.command == "insert":
        return InsertOverwriteParams(
            text=args.text,
            offset=args.offset,
            mode=InsertMode.OVERWRITE if args.overwrite else InsertMode.INSERT,
        )
    if args.command == "datetime":
        return DateTimeParams(
            format=args.format,
            source=TimeSource(args.source),
            offset=args.offset,
            mode=InsertMode.OVERWRITE if args.overwrite else InsertMode.INSERT,
        )
    if args.command == "remove":
        return RemoveCharactersParams(start=args.start, end=args.end)
    if args.command == "case":
        return ChangeCaseParams(mode=CaseMode(args.mode))
    raise ValueError(f"Unknown command: {args.command}")


def load_timestamps(path: Optional[str], directory: Path) -> Dict[Path, datetime]:
    """
    Read capture times supplied as JSON {"relative/name.jpg": "2021-05-01T10:00:00"}

    Args:
        path: JSON file, or None
        directory: Base directory for relative names

    Returns:
        Capture time by absolute path
    """
    if not path:
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        raw = json.load(f)
    return {(directory / name).resolve(): datetime.fromisoformat(value) for name, value in raw.items()}


def collect_files(args, directory: Path, options: RenameOptions) -> List[FileEntry]:
    """Scan and order the files to rename"""
    captured = load_timestamps(getattr(args, "timestamps", None), directory)
    if args.recursive:
        files = scan_recursive(
            directory,
            keyword=args.keyword,
            include_hidden=options.include_hidden,
            ignore_dirs=options.ignore_dirs,
            captured=captured,
        )
    else:
        files = [
            f for f in scan_directory(directory, include_hidden=options.include_hidden, captured=captured)
            if not args.keyword or args.keyword in f.name
        ]
    return sort_files(files, SortKey(args.sort), args.reverse)


def print_preview(state: PreviewState, directory: Path) -> None:
    """Print preview table"""
    print("-" * 80)
    for entry, verdict in state.rows[:PREVIEW_LIMIT]:
        note = f" [{entry.note}]" if entry.note else ""
        print(f"  #{entry.ordinal:<4} {str(entry.source.relative_to(directory)):<36} -> {entry.proposed:<30} "
              f"{verdict.describe()}{note}")
    if len(state.rows) > PREVIEW_LIMIT:
        print(f"  ... and {len(state.rows) - PREVIEW_LIMIT} more files")
    print("-" * 80)


def confirm(prompt: str) -> bool:
    answer = input(f"\n{prompt} (y/N): ").strip().lower()
    return answer == 'y'


def cmd_rename(args) -> int:
    """Handle rule subcommands"""
    directory = Path(args.directory).resolve()
    if not directory.is_dir():
        print(f"Error: Directory does not exist: {directory}")
        return 1

    options = RenameOptions(
        include_hidden=args.include_hidden,
        ignore_dirs=DEFAULT_IGNORE_DIRS + args.ignore_dir,
        dry_run=args.dry_run,
        log_dir=Path(args.log_dir) if args.log_dir else directory / ".rename_backup",
    )

    try:
        params = params_from_args(args)
        files = collect_files(args, directory, options)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    if not files:
        print("No matching files found")
        return 0

    print(f"Found {len(files)} files in {directory}")

    session = PreviewSession(case_insensitive=options.case_insensitive_detect)
    state = session.recompute(files, Field(args.field), params)
    if session.error:
        print(f"Error: {session.error}")
        return 1

    print_preview(state, directory)

    try:
        plan = state.plan()
    except PlanBlocked as e:
        print(f"Cannot rename: {e}. Adjust the parameters and try again.")
        return 1

    if not plan.entries:
        print("No files need renaming")
        return 0

    print(plan.summary())

    if options.dry_run:
        print("\n[Preview mode] Will not actually execute")
        return 0

    if not args.yes and not confirm("Confirm execution?"):
        print("Cancelled")
        return 0

    print("\nExecuting...")
    log_dir = options.log_dir if options.backup_log else None
    result = execute_rename(plan, log_dir=log_dir)
    print(result.summary())
    if log_dir:
        print(f"Logs saved to {log_dir}")

    return 0 if result.failed_count == 0 else 1


def cmd_undo(args) -> int:
    """Handle undo command"""
    log_file = Path(args.log_file)
    try:
        plan = load_undo_plan(log_file)
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: Cannot read {log_file}: {e}")
        return 1

    if not plan.entries:
        print("Nothing to undo")
        return 0

    for entry in plan.entries[:PREVIEW_LIMIT]:
        print(f"  {entry.original:<40} -> {entry.proposed}")

    if not args.yes and not confirm(f"Undo {plan.total_count} renames?"):
        print("Cancelled")
        return 0

    result = execute_rename(plan)
    print(result.summary())
    return 0 if result.failed_count == 0 else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    if args.command is None:
        parser.print_help()
        return 1
    if args.command == "undo":
        return cmd_undo(args)
    return cmd_rename(args)


if __name__ == "__main__":
    sys.exit(main())
