"""
Tests for the Qt worker threads and the main window preview.
"""

import pytest

pytest.importorskip("PySide6")
pytest.importorskip("pytestqt")

from bulk_renamer.core import FileEntry, RenameEntry, RenameOptions, RenamePlan  # noqa: E402
from bulk_renamer.gui import gui_workers  # noqa: E402
from bulk_renamer.gui.gui_mainwindow import MainWindow  # noqa: E402
from bulk_renamer.gui.gui_workers import RenameWorker, ScanWorker  # noqa: E402

pytestmark = pytest.mark.gui


def single_plan(tmp_path):
    (tmp_path / "a.txt").write_text("a", encoding="utf-8")
    source = FileEntry(path=tmp_path / "a.txt", name="a.txt")
    return RenamePlan(entries=[RenameEntry(source=source, proposed="b.txt", ordinal=0)])


class TestWorkers:

    def test_scan_worker(self, qtbot, make_files, tmp_path):
        make_files("one.txt", "two.txt")
        worker = ScanWorker(tmp_path)
        with qtbot.waitSignal(worker.finished, timeout=5000) as blocker:
            worker.start()
        worker.wait()
        assert [f.name for f in blocker.args[0]] == ["one.txt", "two.txt"]

    def test_scan_worker_error(self, qtbot, tmp_path):
        worker = ScanWorker(tmp_path / "missing")
        with qtbot.waitSignal(worker.error, timeout=5000):
            worker.start()
        worker.wait()

    def test_rename_worker(self, qtbot, tmp_path):
        worker = RenameWorker(single_plan(tmp_path))
        with qtbot.waitSignal(worker.finished, timeout=5000) as blocker:
            worker.start()
        worker.wait()
        result = blocker.args[0]
        assert result.success_count == 1
        assert (tmp_path / "b.txt").exists()
        assert not gui_workers.batch_in_progress()

    def test_one_batch_at_a_time(self, qtbot, tmp_path):
        worker = RenameWorker(single_plan(tmp_path))
        gui_workers._batch_lock.acquire()
        try:
            with qtbot.waitSignal(worker.error, timeout=5000) as blocker:
                worker.start()
            worker.wait()
        finally:
            gui_workers._batch_lock.release()
        assert "still running" in blocker.args[0]
        assert (tmp_path / "a.txt").exists()


class TestMainWindow:

    @pytest.fixture
    def window(self, qtbot, make_files):
        window = MainWindow(RenameOptions(case_insensitive_detect=False))
        qtbot.addWidget(window)
        window._on_scan_finished(make_files("IMG_1.jpg", "IMG_2.jpg"))
        return window

    def test_preview_follows_parameters(self, window):
        panel = window.rule_panel
        panel.pattern_edit.setText("IMG_")
        panel.replacement_edit.setText("pic_")
        assert window.table.rowCount() == 2
        assert window.table.item(0, 1).text() == "pic_1.jpg"
        assert window.execute_btn.isEnabled()

    def test_invalid_pattern_keeps_preview(self, window):
        panel = window.rule_panel
        panel.pattern_edit.setText("IMG_")
        panel.replacement_edit.setText("pic_")
        panel.regex_check.setChecked(True)
        panel.pattern_edit.setText("(")
        assert window.status_label.text().startswith("Error")
        assert window.table.item(1, 1).text() == "pic_2.jpg"
        assert not window.execute_btn.isEnabled()

    def test_conflict_disables_execute(self, window):
        panel = window.rule_panel
        panel.rule_combo.setCurrentIndex(3)
        panel.remove_end.setValue(5)
        assert "Duplicate target" in window.table.item(0, 2).text()
        assert not window.execute_btn.isEnabled()
