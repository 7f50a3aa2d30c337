"""
Tests for two-phase execution, per-entry outcomes, logs and undo.
"""

import json

from bulk_renamer.core import (
    FileEntry, RenameEntry, RenamePlan, cleanup_temp_files, execute_rename, load_undo_plan,
)
from bulk_renamer.core.exec_rename import TEMP_PREFIX, save_plan_log


def names_in(directory):
    return sorted(p.name for p in directory.iterdir() if p.is_file())


def make_plan(tmp_path, mapping, create=True):
    """Plan from {original: proposed}; creates each original containing its own name."""
    entries = []
    for i, (original, proposed) in enumerate(mapping.items()):
        path = tmp_path / original
        if create:
            path.write_text(original, encoding="utf-8")
        entries.append(RenameEntry(source=FileEntry(path=path, name=original), proposed=proposed, ordinal=i))
    return RenamePlan(entries=entries)


def test_simple_rename(tmp_path):
    plan = make_plan(tmp_path, {"a.txt": "b.txt"})
    result = execute_rename(plan)
    assert result.success_count == 1
    assert names_in(tmp_path) == ["b.txt"]
    assert (tmp_path / "b.txt").read_text(encoding="utf-8") == "a.txt"


def test_swap_and_chain(tmp_path):
    plan = make_plan(tmp_path, {"x": "y", "y": "x", "a": "b", "b": "c"})
    result = execute_rename(plan)
    assert result.failed_count == 0
    assert names_in(tmp_path) == ["b", "c", "x", "y"]
    assert (tmp_path / "x").read_text(encoding="utf-8") == "y"
    assert (tmp_path / "y").read_text(encoding="utf-8") == "x"
    assert (tmp_path / "c").read_text(encoding="utf-8") == "b"


def test_failure_does_not_stop_the_batch(tmp_path):
    plan = make_plan(tmp_path, {"a": "a2", "b": "b2", "c": "c2"})
    (tmp_path / "b").unlink()

    result = execute_rename(plan)
    assert [o.ordinal for o in result.outcomes] == [0, 1, 2]
    assert [o.ok for o in result.outcomes] == [True, False, True]
    assert result.success_count == 2
    assert isinstance(result.outcomes[1].error, OSError)
    assert names_in(tmp_path) == ["a2", "c2"]


def test_target_created_after_planning_is_not_replaced(tmp_path):
    plan = make_plan(tmp_path, {"a": "b", "c": "d"})
    (tmp_path / "b").write_text("someone else", encoding="utf-8")

    result = execute_rename(plan)
    assert [o.ok for o in result.outcomes] == [False, True]
    assert isinstance(result.outcomes[0].error, FileExistsError)
    assert (tmp_path / "a").read_text(encoding="utf-8") == "a"
    assert (tmp_path / "b").read_text(encoding="utf-8") == "someone else"
    assert not [n for n in names_in(tmp_path) if n.startswith(TEMP_PREFIX)]


def test_dry_run_touches_nothing(tmp_path):
    plan = make_plan(tmp_path, {"a": "b"})
    calls = []
    result = execute_rename(plan, dry_run=True, progress_callback=lambda *args: calls.append(args),
                            log_dir=tmp_path / "logs")
    assert result.dry_run
    assert result.success_count == 1
    assert names_in(tmp_path) == ["a"]
    assert not (tmp_path / "logs").exists()
    assert calls == [(1, 1, "[Preview] a -> b")]
    assert result.undo_plan().entries == []


def test_empty_plan():
    result = execute_rename(RenamePlan())
    assert result.outcomes == []
    assert result.success_count == 0


def test_logs_and_undo(tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    log_dir = tmp_path / "logs"
    plan = make_plan(work, {"a": "b", "b": "c"})

    result = execute_rename(plan, log_dir=log_dir)
    assert result.failed_count == 0
    assert names_in(work) == ["b", "c"]

    plan_logs = sorted(log_dir.glob("rename_plan_*.json"))
    result_logs = sorted(log_dir.glob("rename_result_*.json"))
    assert len(plan_logs) == 1 and len(result_logs) == 1
    data = json.loads(result_logs[0].read_text(encoding="utf-8"))
    assert data["success_count"] == 2
    assert data["failed"] == []

    undo = load_undo_plan(result_logs[0])
    assert [(e.original, e.proposed) for e in undo.entries] == [("b", "a"), ("c", "b")]
    assert execute_rename(undo).failed_count == 0
    assert names_in(work) == ["a", "b"]
    assert (work / "a").read_text(encoding="utf-8") == "a"


def test_undo_plan_from_result(tmp_path):
    plan = make_plan(tmp_path, {"x": "y", "y": "x"})
    result = execute_rename(plan)
    assert execute_rename(result.undo_plan()).failed_count == 0
    assert (tmp_path / "x").read_text(encoding="utf-8") == "x"


def test_cleanup_temp_files(tmp_path):
    (tmp_path / f"{TEMP_PREFIX}abcd1234__photo.jpg").write_text("p", encoding="utf-8")
    (tmp_path / f"{TEMP_PREFIX}abcd1234__taken.jpg").write_text("t", encoding="utf-8")
    (tmp_path / "taken.jpg").write_text("other", encoding="utf-8")

    assert cleanup_temp_files(tmp_path) == 1
    assert (tmp_path / "photo.jpg").read_text(encoding="utf-8") == "p"
    assert (tmp_path / f"{TEMP_PREFIX}abcd1234__taken.jpg").exists()


def test_failed_chain_link_never_overwrites(tmp_path):
    plan = make_plan(tmp_path, {"a": "b", "b": "c"})
    (tmp_path / "c").write_text("outsider", encoding="utf-8")

    result = execute_rename(plan)
    assert [o.ok for o in result.outcomes] == [True, False]
    assert (tmp_path / "b").read_text(encoding="utf-8") == "a"
    assert (tmp_path / "c").read_text(encoding="utf-8") == "outsider"

    left_at = result.outcomes[1].left_at
    assert left_at is not None and left_at.name.startswith(TEMP_PREFIX)
    assert left_at.read_text(encoding="utf-8") == "b"
    assert str(left_at) in result.summary()


def test_left_behind_file_is_logged(tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    log_dir = tmp_path / "logs"
    plan = make_plan(work, {"a": "b", "b": "c"})
    (work / "c").write_text("outsider", encoding="utf-8")

    result = execute_rename(plan, log_dir=log_dir)
    data = json.loads(next(log_dir.glob("rename_result_*.json")).read_text(encoding="utf-8"))
    assert data["failed"][0]["left_at"] == str(result.outcomes[1].left_at)


def test_long_names(tmp_path):
    old, new = "a" * 240 + ".txt", "b" * 240 + ".txt"
    plan = make_plan(tmp_path, {old: new})
    result = execute_rename(plan)
    assert result.failed_count == 0
    assert names_in(tmp_path) == [new]


def test_cleanup_long_name_from_plan_log(tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    log_dir = tmp_path / "logs"
    long_name = "x" * 244
    plan = make_plan(work, {long_name: "short"}, create=False)
    temp = work / f"{TEMP_PREFIX}abcd1234"
    temp.write_text("data", encoding="utf-8")
    save_plan_log(plan, log_dir, {0: temp})

    assert cleanup_temp_files(work) == 0
    assert cleanup_temp_files(work, log_dir=log_dir) == 1
    assert (work / long_name).read_text(encoding="utf-8") == "data"
