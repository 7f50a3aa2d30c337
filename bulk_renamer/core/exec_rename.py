"""
exec_rename.py - Rename Execution Module

Responsibilities:
- Two-phase execution (first rename to temporary name, then to final name)
- Per-entry outcome reporting; a failure never stops the batch
- Plan/result logs and undo
- dry_run support
"""

from pathlib import Path
from typing import Dict, List, Tuple, Optional, Callable
from dataclasses import dataclass, field
from datetime import datetime
import errno
import json
import logging
import os
import uuid

from .models_fs import FileEntry, RenameEntry, RenamePlan
from .safety_checks import check_rename_op

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".__tmp_rename__"


@dataclass
class EntryOutcome:
    """Outcome of one plan entry"""
    ordinal: int
    src: Path
    dst: Path
    error: Optional[OSError] = None
    left_at: Optional[Path] = None  # Temporary path when the file could not be put back

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RenameResult:
    """Rename execution result, one outcome per plan entry in ordinal order"""
    outcomes: List[EntryOutcome] = field(default_factory=list)
    dry_run: bool = False

    @property
    def success(self) -> List[EntryOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[EntryOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def success_count(self) -> int:
        return len(self.success)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    def summary(self) -> str:
        """Generate summary"""
        lines = [
            "Execution Result:" + (" (dry run)" if self.dry_run else ""),
            f"  - Success: {self.success_count}",
            f"  - Failed: {self.failed_count}",
        ]
        if self.failed:
            lines.append("Failure Details:")
            for o in self.failed[:10]:  # Show at most 10
                lines.append(f"  - #{o.ordinal} {o.src.name} -> {o.dst.name}: {o.error}")
                if o.left_at:
                    lines.append(f"    file left at {o.left_at}")
            if len(self.failed) > 10:
                lines.append(f"  ... and {len(self.failed) - 10} more failures")
        return "\n".join(lines)

    def undo_plan(self) -> RenamePlan:
        """Plan that moves every renamed file back to its original name"""
        if self.dry_run:
            return RenamePlan()
        return _reverse_plan([(o.src, o.dst) for o in self.success])


def _reverse_plan(pairs: List[Tuple[Path, Path]]) -> RenamePlan:
    entries = []
    for ordinal, (src, dst) in enumerate(pairs):
        source = FileEntry(path=dst, name=dst.name)
        entries.append(RenameEntry(source=source, proposed=src.name, ordinal=ordinal))
    return RenamePlan(entries=entries)




# Filename length limit of common filesystems, in bytes
NAME_MAX = 255


def _generate_temp_name(original: Path) -> Path:
    """
    Generate temporary filename

    The original name is embedded when it fits, so cleanup_temp_files can
    restore the file without the plan log.
    """
    unique_id = uuid.uuid4().hex[:8]
    temp_name = f"{TEMP_PREFIX}{unique_id}__{original.name}"
    if len(temp_name.encode("utf-8")) > NAME_MAX:
        temp_name = f"{TEMP_PREFIX}{unique_id}"
    return original.parent / temp_name


def _is_temp_name(name: str) -> bool:
    """Check if it's a temporary filename"""
    return name.startswith(TEMP_PREFIX)


def execute_rename(
    plan: RenamePlan,
    dry_run: bool = False,
    progress_callback: Optional[Callable[[int, int, str], None]] = None,
    log_dir: Optional[Path] = None
) -> RenameResult:
    """
    Execute rename plan (two-phase)

    Every step is a single os.rename. Phase 1 moves all sources out of the
    way so targets that are other sources of the batch are free in phase 2.
    No step ever replaces an existing path.

    Args:
        plan: Rename plan
        dry_run: Whether to preview only
        progress_callback: Progress callback (current, total, message)
        log_dir: Log directory (for saving execution logs)

    Returns:
        Execution result with one outcome per plan entry
    """
    entries = sorted(plan.entries, key=lambda e: e.ordinal)
    total = len(entries)
    outcomes = {e.ordinal: EntryOutcome(e.ordinal, e.src, e.dst) for e in entries}
    result = RenameResult(dry_run=dry_run)

    if total == 0:
        return result

    if dry_run:
        # Preview mode only
        for i, entry in enumerate(entries):
            if progress_callback:
                progress_callback(i + 1, total, f"[Preview] {entry.original} -> {entry.proposed}")
        result.outcomes = [outcomes[e.ordinal] for e in entries]
        return result

    temp_paths: Dict[int, Path] = {e.ordinal: _generate_temp_name(e.src) for e in entries}
    if log_dir:
        save_plan_log(plan, log_dir, temp_paths)

    # Phase 1: Rename all to temporary names
    temp_mapping: List[Tuple[RenameEntry, Path]] = []

    for i, entry in enumerate(entries):
        if progress_callback:
            progress_callback(i + 1, total * 2, f"[Phase 1] {entry.original} -> temp name")

        safe, reason = check_rename_op(entry.src, entry.dst)
        if not safe:
            outcomes[entry.ordinal].error = OSError(errno.ENOENT if not entry.src.exists() else errno.EINVAL,
                                                    reason, str(entry.src))
            logger.warning("Skipping %s: %s", entry.src, reason)
            continue

        temp_path = temp_paths[entry.ordinal]
        try:
            os.rename(entry.src, temp_path)
            temp_mapping.append((entry, temp_path))
        except OSError as e:
            outcomes[entry.ordinal].error = e
            logger.warning("Phase 1 failed for %s: %s", entry.src, e)

    # Phase 2: Rename from temporary names to final names
    for i, (entry, temp_path) in enumerate(temp_mapping):
        if progress_callback:
            progress_callback(total + i + 1, total * 2, f"[Phase 2] temp name -> {entry.proposed}")

        try:
            if os.path.lexists(entry.dst):
                # Appeared after planning; os.rename would silently replace it on POSIX
                raise FileExistsError(errno.EEXIST, "Target already exists", str(entry.dst))
            os.rename(temp_path, entry.dst)
            logger.debug("Renamed %s -> %s", entry.src, entry.dst)
        except OSError as e:
            outcomes[entry.ordinal].error = e
            logger.warning("Phase 2 failed for %s: %s", entry.src, e)
            _restore(outcomes[entry.ordinal], temp_path)

    result.outcomes = [outcomes[e.ordinal] for e in entries]
    logger.info("Renamed %d of %d files (%d failed)",
                result.success_count, total, result.failed_count)

    if log_dir:
        save_result_log(result, log_dir)

    return result


def _restore(outcome: EntryOutcome, temp_path: Path) -> None:
    """Put a file back under its original name, or leave it at temp_path if that is taken"""
    if os.path.lexists(outcome.src):
        # Another entry of the batch now uses this name
        outcome.left_at = temp_path
        logger.error("Cannot restore %s, name is taken; file left at %s", outcome.src, temp_path)
        return
    try:
        os.rename(temp_path, outcome.src)
    except OSError as e:
        outcome.left_at = temp_path
        logger.error("Restore failed, %s left at %s: %s", outcome.src, temp_path, e)


def _log_file(log_dir: Path, kind: str) -> Path:
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    return log_dir / f"rename_{kind}_{timestamp}.json"


def save_plan_log(plan: RenamePlan, log_dir: Path, temp_paths: Optional[Dict[int, Path]] = None) -> Path:
    """
    Save execution plan log

    Args:
        plan: Rename plan
        log_dir: Log directory
        temp_paths: Temporary path by ordinal, recorded for cleanup_temp_files

    Returns:
        Log file path
    """
    log_file = _log_file(log_dir, "plan")
    temp_paths = temp_paths or {}

    operations = []
    for e in plan.entries:
        op = {"ordinal": e.ordinal, "src": str(e.src), "dst": str(e.dst)}
        if e.ordinal in temp_paths:
            op["temp"] = str(temp_paths[e.ordinal])
        operations.append(op)

    data = {
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "total_ops": plan.total_count,
        "operations": operations,
    }

    with open(log_file, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return log_file


def save_result_log(result: RenameResult, log_dir: Path) -> Path:
    """Save execution result log"""
    log_file = _log_file(log_dir, "result")

    failed = []
    for o in result.failed:
        item = {"ordinal": o.ordinal, "src": str(o.src), "dst": str(o.dst), "error": str(o.error)}
        if o.left_at:
            item["left_at"] = str(o.left_at)
        failed.append(item)

    data = {
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "success_count": result.success_count,
        "failed_count": result.failed_count,
        "success": [
            {"ordinal": o.ordinal, "src": str(o.src), "dst": str(o.dst)}
            for o in result.success
        ],
        "failed": failed,
    }

    with open(log_file, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return log_file


def load_undo_plan(log_file: Path) -> RenamePlan:
    """
    Build undo plan from a saved result log

    Args:
        log_file: File written by save_result_log

    Returns:
        Plan renaming each successful target back to its source name
    """
    with open(log_file, 'r', encoding='utf-8') as f:
        data = json.load(f)

    pairs = [(Path(item["src"]), Path(item["dst"])) for item in data.get("success", [])]
    return _reverse_plan(pairs)


def _temp_origins(log_dir: Path) -> Dict[str, Path]:
    """Original path by temporary filename, from saved plan logs"""
    origins: Dict[str, Path] = {}
    for log_file in sorted(Path(log_dir).glob("rename_plan_*.json")):
        try:
            with open(log_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Cannot read %s: %s", log_file, e)
            continue
        for op in data.get("operations", []):
            if "temp" in op:
                origins[Path(op["temp"]).name] = Path(op["src"])
    return origins


def cleanup_temp_files(directory: Path, log_dir: Optional[Path] = None) -> int:
    """
    Restore temporary files left by an interrupted run

    Args:
        directory: Directory
        log_dir: Plan logs, needed for temporary names without an embedded original

    Returns:
        Number of restored files
    """
    origins = _temp_origins(log_dir) if log_dir and Path(log_dir).is_dir() else {}
    count = 0
    for item in Path(directory).iterdir():
        if not item.is_file() or not _is_temp_name(item.name):
            continue

        # Temporary name format: .__tmp_rename__{uuid}[__{original_name}]
        parts = item.name.split("__", 3)
        if len(parts) == 4:
            original_path = item.parent / parts[3]
        elif item.name in origins:
            original_path = item.parent / origins[item.name].name
        else:
            logger.warning("Not restoring %s: original name unknown", item)
            continue

        if os.path.lexists(original_path):
            logger.warning("Not restoring %s: %s exists", item, original_path)
            continue
        try:
            os.rename(item, original_path)
            count += 1
        except OSError as e:
            logger.warning("Cannot restore %s: %s", item, e)
    return count
