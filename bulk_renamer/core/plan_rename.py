"""
plan_rename.py - Rename Plan Generation Module

Responsibilities:
- Compute proposed names for the whole file list (preview)
- Conflict detection (duplicate targets, existing files, invalid names)
- Build the executable RenamePlan
- Keep the latest valid preview for the shells (PreviewSession)
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple
import logging

from .errors import InvalidParameters, MissingMetadata, PlanBlocked
from .field_select import select_and_recombine
from .models_fs import (
    ConflictVerdict, Field, FileEntry, RenameEntry, RenamePlan,
    VerdictKind, normalize_for_comparison,
)
from .rules import RuleContext, RuleParameters, apply_rule, validate_params
from .scan_files import existing_paths_for
from .text_match import is_valid_filename

logger = logging.getLogger(__name__)


def compute_preview(
    entries: List[FileEntry],
    field: Field,
    params: RuleParameters,
    now: Optional[datetime] = None,
) -> List[RenameEntry]:
    """
    Compute proposed names for every file

    Args:
        entries: Files in display order
        field: Field the rule is applied to
        params: Rule parameters
        now: Current time for TimeSource.NOW (one value for the whole batch)

    Returns:
        One RenameEntry per file, same order

    Raises:
        InvalidParameters: Parameters unusable, nothing is computed
    """
    validate_params(params)
    if now is None:
        now = datetime.now()

    results: List[RenameEntry] = []
    for ordinal, entry in enumerate(entries):
        context = RuleContext(now=now, entry=entry)
        try:
            proposed = select_and_recombine(
                entry.file_name, field, lambda text: apply_rule(text, params, context)
            )
            note = ""
        except MissingMetadata as e:
            # Only this file falls back to its current name
            logger.debug("Keeping %s unchanged: %s", entry.name, e)
            proposed = entry.name
            note = str(e)
        results.append(RenameEntry(source=entry, proposed=proposed, ordinal=ordinal, note=note))

    return results


class ConflictResolver:
    """Conflict resolver"""

    def __init__(self, case_insensitive: bool = False):
        """
        Initialize conflict resolver

        Args:
            case_insensitive: Whether names differing only in case collide
        """
        self.case_insensitive = case_insensitive
        # Occupied names grouped by directory
        # key: directory path, value: occupied names set (normalized)
        self.occupied: Dict[Path, Set[str]] = defaultdict(set)

    def _normalize(self, name: str) -> str:
        """Normalize filename for comparison"""
        return normalize_for_comparison(name, self.case_insensitive)

    def add_existing(self, directory: Path, names: Iterable[str]) -> None:
        """
        Add existing filenames (on disk)

        Args:
            directory: Directory
            names: Filename set
        """
        self.occupied[directory].update(self._normalize(n) for n in names)

    def remove_participating(self, directory: Path, names: Iterable[str]) -> None:
        """
        Remove names of files that move away (these names will be freed)

        Args:
            directory: Directory
            names: Filename set to remove
        """
        self.occupied[directory].difference_update(self._normalize(n) for n in names)

    def is_occupied(self, directory: Path, name: str) -> bool:
        """Check if name is already occupied"""
        return self._normalize(name) in self.occupied[directory]

    def resolve(self, entries: List[RenameEntry], existing_paths: Iterable[Path]) -> List[ConflictVerdict]:
        """
        Classify every entry

        The result depends only on the set of entries and existing paths,
        never on the order in which conflicts are found or on earlier calls.

        Args:
            entries: Preview entries
            existing_paths: Paths currently on disk

        Returns:
            One verdict per entry, same order
        """
        self.occupied = defaultdict(set)
        verdicts: List[Optional[ConflictVerdict]] = [None] * len(entries)
        moving: List[int] = []

        for i, entry in enumerate(entries):
            if entry.is_same:
                verdicts[i] = ConflictVerdict(VerdictKind.UNCHANGED)
                continue
            valid, error = is_valid_filename(entry.proposed)
            if not valid:
                verdicts[i] = ConflictVerdict(VerdictKind.INVALID_NAME, reason=error)
                continue
            moving.append(i)

        # Duplicate targets among moving entries
        groups: Dict[Tuple[Path, str], List[int]] = defaultdict(list)
        for i in moving:
            entry = entries[i]
            groups[(entry.source.directory, self._normalize(entry.proposed))].append(i)

        for members in groups.values():
            if len(members) < 2:
                continue
            ordinals = sorted(entries[i].ordinal for i in members)
            for i in members:
                peers = tuple(o for o in ordinals if o != entries[i].ordinal)
                verdicts[i] = ConflictVerdict(VerdictKind.DUPLICATE_TARGET, peers=peers)

        # Names on disk, plus every batch original; then free the ones that move
        for path in existing_paths:
            path = Path(path)
            self.add_existing(path.parent, [path.name])
        for entry in entries:
            self.add_existing(entry.source.directory, [entry.original])
        for i in moving:
            entry = entries[i]
            self.remove_participating(entry.source.directory, [entry.original])

        for i in moving:
            if verdicts[i] is not None:
                continue
            entry = entries[i]
            if self.is_occupied(entry.source.directory, entry.proposed):
                verdicts[i] = ConflictVerdict(VerdictKind.TARGET_EXISTS, path=entry.dst)
            else:
                verdicts[i] = ConflictVerdict(VerdictKind.OK)

        return verdicts


def resolve_conflicts(
    entries: List[RenameEntry],
    existing_paths: Iterable[Path] = (),
    case_insensitive: bool = False,
) -> List[ConflictVerdict]:
    """
    Classify entries with a fresh resolver

    Args:
        entries: Preview entries
        existing_paths: Paths currently on disk
        case_insensitive: Whether names differing only in case collide

    Returns:
        One verdict per entry
    """
    return ConflictResolver(case_insensitive=case_insensitive).resolve(entries, existing_paths)


def is_plan_executable(verdicts: List[ConflictVerdict]) -> bool:
    """No blocking verdict and at least one entry to rename"""
    if any(v.is_blocking for v in verdicts):
        return False
    return any(v.kind == VerdictKind.OK for v in verdicts)


def build_plan(entries: List[RenameEntry], verdicts: List[ConflictVerdict]) -> RenamePlan:
    """
    Build executable plan from OK entries

    Args:
        entries: Preview entries
        verdicts: Verdicts for the same entries

    Returns:
        Rename plan ordered by ordinal

    Raises:
        PlanBlocked: Some entry has a blocking verdict
    """
    if len(entries) != len(verdicts):
        raise ValueError("entries and verdicts differ in length")

    blocked = [e.ordinal for e, v in zip(entries, verdicts) if v.is_blocking]
    if blocked:
        raise PlanBlocked(blocked)

    ok = [e for e, v in zip(entries, verdicts) if v.kind == VerdictKind.OK]
    return RenamePlan(entries=sorted(ok, key=lambda e: e.ordinal))


@dataclass
class PreviewState:
    """Result of one full recompute"""
    entries: List[RenameEntry] = field(default_factory=list)
    verdicts: List[ConflictVerdict] = field(default_factory=list)

    @property
    def executable(self) -> bool:
        return is_plan_executable(self.verdicts)

    @property
    def rows(self) -> List[Tuple[RenameEntry, ConflictVerdict]]:
        return list(zip(self.entries, self.verdicts))

    @property
    def blocked_count(self) -> int:
        return sum(1 for v in self.verdicts if v.is_blocking)

    def plan(self) -> RenamePlan:
        return build_plan(self.entries, self.verdicts)


class PreviewSession:
    """
    Holds the latest valid preview

    Every recompute replaces the whole state. A recompute that fails on its
    parameters leaves the previous state in place and records the error.
    """

    def __init__(self, case_insensitive: bool = False):
        self.case_insensitive = case_insensitive
        self.state = PreviewState()
        self.error: Optional[InvalidParameters] = None

    def recompute(
        self,
        files: List[FileEntry],
        field: Field,
        params: RuleParameters,
        existing_paths: Optional[Iterable[Path]] = None,
        now: Optional[datetime] = None,
    ) -> PreviewState:
        """
        Recompute preview and verdicts

        Args:
            files: Current file list
            field: Field the rule is applied to
            params: Rule parameters
            existing_paths: Paths on disk; scanned from the files' directories if None
            now: Current time override

        Returns:
            Current state (the previous one if parameters are invalid)
        """
        try:
            entries = compute_preview(files, field, params, now=now)
        except InvalidParameters as e:
            logger.warning("Preview not updated: %s", e)
            self.error = e
            return self.state

        if existing_paths is None:
            existing_paths = existing_paths_for(files)

        verdicts = resolve_conflicts(entries, existing_paths, self.case_insensitive)
        self.state = PreviewState(entries=entries, verdicts=verdicts)
        self.error = None
        logger.debug("Preview recomputed: %d entries, %d blocked",
                     len(entries), self.state.blocked_count)
        return self.state
