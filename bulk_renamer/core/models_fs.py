"""
models_fs.py - Core Data Structure Definitions

Contains:
- FileName: Filename split into stem and extension
- FileEntry: File information supplied by the scanner
- Field: Which part of the filename a rule transforms
- RenameEntry: One file paired with its proposed name
- ConflictVerdict: Per-entry conflict classification
- RenamePlan: Executable subset of the entries
- RenameOptions: Rename options configuration
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Tuple
from enum import Enum
import platform


class Field(Enum):
    """Part of the filename a rule is applied to"""
    NAME = "name"        # Stem only
    SUFFIX = "suffix"    # Extension only
    ALL = "all"          # Whole filename, no split


class SortKey(Enum):
    """Sort key enumeration"""
    MTIME = "mtime"      # Modification time
    SIZE = "size"        # File size
    NAME = "name"        # Filename
    CTIME = "ctime"      # Creation time (varies across platforms)


class VerdictKind(Enum):
    """Conflict verdict kinds"""
    OK = "ok"
    UNCHANGED = "unchanged"
    DUPLICATE_TARGET = "duplicate_target"
    TARGET_EXISTS = "target_exists"
    INVALID_NAME = "invalid_name"

    @property
    def is_blocking(self) -> bool:
        return self in (VerdictKind.DUPLICATE_TARGET,
                        VerdictKind.TARGET_EXISTS,
                        VerdictKind.INVALID_NAME)


@dataclass(frozen=True, order=True)
class FileName:
    """
    Filename with stem/extension split on the last dot

    `extension` is None when there is no dot to split on. A trailing dot
    ("name.") gives an empty extension so the name recombines exactly.
    """
    value: str

    @property
    def parts(self) -> Tuple[str, Optional[str]]:
        return split_file_name(self.value)

    @property
    def stem(self) -> str:
        return self.parts[0]

    @property
    def extension(self) -> Optional[str]:
        return self.parts[1]

    def __str__(self) -> str:
        return self.value


def split_file_name(name: str) -> Tuple[str, Optional[str]]:
    """
    Split filename at the last dot

    Args:
        name: Filename (no directory part)

    Returns:
        (stem, extension), extension is None if there is none
    """
    if name in (".", ".."):
        return name, None

    stem, dot, extension = name.rpartition(".")
    if not dot or not stem:
        # No dot at all, or only a leading dot (hidden file)
        return name, None
    return stem, extension


@dataclass(frozen=True)
class FileEntry:
    """File information data class"""
    path: Path                              # Full path
    name: str                               # Filename (with suffix)
    size: int = 0                           # File size (bytes)
    mtime: Optional[float] = None           # Modification time (timestamp)
    atime: Optional[float] = None           # Access time (timestamp)
    ctime: Optional[float] = None           # Creation/change time (timestamp)
    captured_at: Optional[datetime] = None  # Capture time read by the caller (e.g. EXIF)

    @classmethod
    def from_path(cls, p: Path, captured_at: Optional[datetime] = None) -> "FileEntry":
        """Create FileEntry from Path object"""
        p = Path(p)
        stat = p.stat()
        return cls(
            path=p,
            name=p.name,
            size=stat.st_size,
            mtime=stat.st_mtime,
            atime=stat.st_atime,
            ctime=stat.st_ctime,
            captured_at=captured_at,
        )

    @property
    def file_name(self) -> FileName:
        return FileName(self.name)

    @property
    def directory(self) -> Path:
        return self.path.parent

    def relative_to(self, base: Path) -> str:
        """Get relative path string"""
        try:
            return str(self.path.relative_to(base))
        except ValueError:
            return str(self.path)


@dataclass(frozen=True)
class RenameEntry:
    """One file with its currently proposed name"""
    source: FileEntry
    proposed: str
    ordinal: int
    note: str = ""                  # Per-file degradation message (e.g. missing metadata)

    @property
    def original(self) -> str:
        return self.source.name

    @property
    def src(self) -> Path:
        return self.source.path

    @property
    def dst(self) -> Path:
        return self.source.directory / self.proposed

    @property
    def is_same(self) -> bool:
        """Whether proposed name equals the original"""
        return self.proposed == self.source.name


@dataclass(frozen=True)
class ConflictVerdict:
    """Conflict classification of one entry"""
    kind: VerdictKind
    peers: Tuple[int, ...] = ()     # Other ordinals with the same target (DUPLICATE_TARGET)
    path: Optional[Path] = None     # Colliding path (TARGET_EXISTS)
    reason: str = ""                # Explanation (INVALID_NAME)

    @property
    def is_blocking(self) -> bool:
        return self.kind.is_blocking

    def describe(self) -> str:
        """Short human readable status"""
        if self.kind == VerdictKind.OK:
            return "Will Rename"
        if self.kind == VerdictKind.UNCHANGED:
            return "No Change"
        if self.kind == VerdictKind.DUPLICATE_TARGET:
            return "Duplicate target (with #" + ", #".join(str(p) for p in self.peers) + ")"
        if self.kind == VerdictKind.TARGET_EXISTS:
            return f"Target exists: {self.path}"
        return f"Invalid name: {self.reason}"


@dataclass
class RenamePlan:
    """Conflict-free entries ready for execution, in ordinal order"""
    entries: List[RenameEntry] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        """Total number of operations"""
        return len(self.entries)

    def summary(self) -> str:
        """Generate summary"""
        lines = [
            f"Rename Plan Summary:",
            f"  - Total operations: {self.total_count}",
        ]
        return "\n".join(lines)


DEFAULT_IGNORE_DIRS = [".git", "__pycache__", ".rename_backup", "node_modules"]


def is_case_insensitive_fs() -> bool:
    """Detect if current filesystem is case-insensitive"""
    return platform.system() in ("Windows", "Darwin")


@dataclass
class RenameOptions:
    """Rename options configuration"""
    # Case-insensitive conflict detection (Windows/macOS default to insensitive)
    case_insensitive_detect: bool = field(default_factory=is_case_insensitive_fs)

    # Scan options
    include_hidden: bool = False    # Whether to include hidden files
    ignore_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_DIRS))

    # Execution options
    dry_run: bool = False           # Preview only, do not actually execute
    backup_log: bool = True         # Whether to save execution logs
    log_dir: Path = field(default_factory=lambda: Path(".rename_backup"))


def normalize_for_comparison(name: str, case_insensitive: bool) -> str:
    """Normalize filename for comparison"""
    if case_insensitive:
        return name.casefold()
    return name
