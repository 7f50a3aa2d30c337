"""
gui_mainwindow.py - GUI Main Window

Single window: file source, rule settings, live preview table, execute/undo.
The preview is recomputed on every parameter change.
"""

from pathlib import Path
from typing import Optional, List

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QLabel,
    QLineEdit, QPushButton, QCheckBox, QComboBox, QSpinBox, QStackedWidget,
    QTableWidget, QTableWidgetItem, QProgressBar, QFileDialog, QMessageBox,
    QHeaderView, QGroupBox,
)
from PySide6.QtCore import Slot
from PySide6.QtGui import QColor

from ..core import (
    CaseMode, ChangeCaseParams, DateTimeParams, Field, FileEntry, InsertMode,
    InsertOverwriteParams, PlanBlocked, PreviewSession, RemoveCharactersParams,
    RenameOptions, RenameResult, ReplaceParams, RuleKind, TimeSource, VerdictKind,
)
from ..core.rules import RuleParameters
from .gui_workers import ScanWorker, RenameWorker, batch_in_progress

OFFSET_RANGE = 9999

STATUS_COLORS = {
    VerdictKind.OK: QColor(0, 150, 0),
    VerdictKind.UNCHANGED: QColor(150, 150, 150),
    VerdictKind.DUPLICATE_TARGET: QColor(200, 0, 0),
    VerdictKind.TARGET_EXISTS: QColor(200, 0, 0),
    VerdictKind.INVALID_NAME: QColor(200, 0, 0),
}


def _offset_spin() -> QSpinBox:
    spin = QSpinBox()
    spin.setRange(-OFFSET_RANGE, OFFSET_RANGE)
    spin.setToolTip("Negative values count from the end")
    return spin


class RulePanel(QWidget):
    """Settings for all rules, one page per rule"""

    def __init__(self, on_change, parent=None):
        super().__init__(parent)
        self._on_change = on_change
        layout = QGridLayout(self)

        layout.addWidget(QLabel("Rule:"), 0, 0)
        self.rule_combo = QComboBox()
        for kind in RuleKind:
            self.rule_combo.addItem(kind.label, kind)
        layout.addWidget(self.rule_combo, 0, 1)

        layout.addWidget(QLabel("Apply to:"), 0, 2)
        self.field_combo = QComboBox()
        self.field_combo.addItem("Name", Field.NAME)
        self.field_combo.addItem("Suffix", Field.SUFFIX)
        self.field_combo.addItem("Name + Suffix", Field.ALL)
        layout.addWidget(self.field_combo, 0, 3)

        self.pages = QStackedWidget()
        self.pages.addWidget(self._replace_page())
        self.pages.addWidget(self._insert_page())
        self.pages.addWidget(self._date_time_page())
        self.pages.addWidget(self._remove_page())
        self.pages.addWidget(self._case_page())
        layout.addWidget(self.pages, 1, 0, 1, 4)

        self.rule_combo.currentIndexChanged.connect(self.pages.setCurrentIndex)
        self._watch(self.rule_combo, self.field_combo)

    def _watch(self, *widgets):
        """Recompute preview when any widget changes"""
        for w in widgets:
            if isinstance(w, QLineEdit):
                w.textChanged.connect(self._on_change)
            elif isinstance(w, QCheckBox):
                w.toggled.connect(self._on_change)
            elif isinstance(w, QSpinBox):
                w.valueChanged.connect(self._on_change)
            elif isinstance(w, QComboBox):
                w.currentIndexChanged.connect(self._on_change)

    def _replace_page(self) -> QWidget:
        page = QWidget()
        grid = QGridLayout(page)
        grid.addWidget(QLabel("Find:"), 0, 0)
        self.pattern_edit = QLineEdit()
        grid.addWidget(self.pattern_edit, 0, 1)
        grid.addWidget(QLabel("Replace with:"), 1, 0)
        self.replacement_edit = QLineEdit()
        self.replacement_edit.setPlaceholderText("Leave empty to delete; \\1 refers to a group")
        grid.addWidget(self.replacement_edit, 1, 1)
        self.regex_check = QCheckBox("Regular expression")
        self.case_check = QCheckBox("Case sensitive")
        self.case_check.setChecked(True)
        grid.addWidget(self.regex_check, 2, 0)
        grid.addWidget(self.case_check, 2, 1)
        self._watch(self.pattern_edit, self.replacement_edit, self.regex_check, self.case_check)
        return page

    def _insert_page(self) -> QWidget:
        page = QWidget()
        grid = QGridLayout(page)
        grid.addWidget(QLabel("Text:"), 0, 0)
        self.insert_edit = QLineEdit()
        grid.addWidget(self.insert_edit, 0, 1, 1, 3)
        grid.addWidget(QLabel("At position:"), 1, 0)
        self.insert_offset = _offset_spin()
        grid.addWidget(self.insert_offset, 1, 1)
        self.insert_mode = QComboBox()
        self.insert_mode.addItem("Insert", InsertMode.INSERT)
        self.insert_mode.addItem("Overwrite", InsertMode.OVERWRITE)
        grid.addWidget(self.insert_mode, 1, 2)
        self._watch(self.insert_edit, self.insert_offset, self.insert_mode)
        return page

    def _date_time_page(self) -> QWidget:
        page = QWidget()
        grid = QGridLayout(page)
        grid.addWidget(QLabel("Time:"), 0, 0)
        self.time_source = QComboBox()
        self.time_source.addItem("Current time", TimeSource.NOW)
        self.time_source.addItem("Picture taken", TimeSource.FILE_METADATA)
        self.time_source.addItem("Modified", TimeSource.MODIFIED)
        self.time_source.addItem("Accessed", TimeSource.ACCESSED)
        grid.addWidget(self.time_source, 0, 1)
        grid.addWidget(QLabel("Format:"), 1, 0)
        self.format_edit = QLineEdit("%Y-%m-%d")
        grid.addWidget(self.format_edit, 1, 1, 1, 2)
        grid.addWidget(QLabel("At position:"), 2, 0)
        self.dt_offset = _offset_spin()
        grid.addWidget(self.dt_offset, 2, 1)
        self.dt_mode = QComboBox()
        self.dt_mode.addItem("Insert", InsertMode.INSERT)
        self.dt_mode.addItem("Overwrite", InsertMode.OVERWRITE)
        grid.addWidget(self.dt_mode, 2, 2)
        self._watch(self.time_source, self.format_edit, self.dt_offset, self.dt_mode)
        return page

    def _remove_page(self) -> QWidget:
        page = QWidget()
        grid = QGridLayout(page)
        grid.addWidget(QLabel("From:"), 0, 0)
        self.remove_start = _offset_spin()
        grid.addWidget(self.remove_start, 0, 1)
        grid.addWidget(QLabel("To (exclusive):"), 0, 2)
        self.remove_end = _offset_spin()
        grid.addWidget(self.remove_end, 0, 3)
        self._watch(self.remove_start, self.remove_end)
        return page

    def _case_page(self) -> QWidget:
        page = QWidget()
        grid = QGridLayout(page)
        grid.addWidget(QLabel("Case:"), 0, 0)
        self.case_mode = QComboBox()
        for mode in CaseMode:
            self.case_mode.addItem(mode.value.replace("_", " ").capitalize(), mode)
        grid.addWidget(self.case_mode, 0, 1)
        self._watch(self.case_mode)
        return page

    @property
    def field(self) -> Field:
        return self.field_combo.currentData()

    def params(self) -> RuleParameters:
        """Parameters of the selected rule"""
        kind = self.rule_combo.currentData()
        if kind == RuleKind.REPLACE:
            return ReplaceParams(
                pattern=self.pattern_edit.text(),
                replacement=self.replacement_edit.text(),
                use_regex=self.regex_check.isChecked(),
                case_sensitive=self.case_check.isChecked(),
            )
        if kind == RuleKind.INSERT_OVERWRITE:
            return InsertOverwriteParams(
                text=self.insert_edit.text(),
                offset=self.insert_offset.value(),
                mode=self.insert_mode.currentData(),
            )
        if kind == RuleKind.DATE_TIME:
            return DateTimeParams(
                format=self.format_edit.text(),
                source=self.time_source.currentData(),
                offset=self.dt_offset.value(),
                mode=self.dt_mode.currentData(),
            )
        if kind == RuleKind.REMOVE_CHARACTERS:
            return RemoveCharactersParams(start=self.remove_start.value(), end=self.remove_end.value())
        return ChangeCaseParams(mode=self.case_mode.currentData())


class MainWindow(QMainWindow):
    """Main window"""

    def __init__(self, options: Optional[RenameOptions] = None):
        super().__init__()
        self.setWindowTitle("Bulk Renamer")
        self.setMinimumSize(900, 640)

        self.options = options or RenameOptions()
        self.files: List[FileEntry] = []
        self.session = PreviewSession(case_insensitive=self.options.case_insensitive_detect)
        self.last_result: Optional[RenameResult] = None
        self.scan_worker: Optional[ScanWorker] = None
        self.rename_worker: Optional[RenameWorker] = None

        self._init_ui()

    def _init_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        # Source group
        source_group = QGroupBox("Files")
        source_layout = QHBoxLayout(source_group)
        self.dir_edit = QLineEdit()
        self.dir_edit.setPlaceholderText("Select directory...")
        source_layout.addWidget(self.dir_edit, 1)
        self.browse_btn = QPushButton("Browse...")
        self.browse_btn.clicked.connect(self._browse_directory)
        source_layout.addWidget(self.browse_btn)
        self.recursive_check = QCheckBox("Recursive")
        source_layout.addWidget(self.recursive_check)
        self.scan_btn = QPushButton("Load")
        self.scan_btn.clicked.connect(self._do_scan)
        source_layout.addWidget(self.scan_btn)
        layout.addWidget(source_group)

        # Rule group
        rule_group = QGroupBox("Rule")
        rule_layout = QVBoxLayout(rule_group)
        self.rule_panel = RulePanel(self._recompute)
        rule_layout.addWidget(self.rule_panel)
        layout.addWidget(rule_group)

        # Preview table
        self.table = QTableWidget()
        self.table.setColumnCount(3)
        self.table.setHorizontalHeaderLabels(["Original Name", "New Name", "Status"])
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        self.table.horizontalHeader().setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        self.table.horizontalHeader().setSectionResizeMode(2, QHeaderView.ResizeMode.ResizeToContents)
        self.table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        layout.addWidget(self.table, 1)

        # Progress and execution
        bottom_layout = QHBoxLayout()
        self.progress_bar = QProgressBar()
        self.progress_bar.setVisible(False)
        bottom_layout.addWidget(self.progress_bar, 1)
        self.undo_btn = QPushButton("Undo Last Rename")
        self.undo_btn.clicked.connect(self._do_undo)
        self.undo_btn.setEnabled(False)
        bottom_layout.addWidget(self.undo_btn)
        self.execute_btn = QPushButton("Execute Rename")
        self.execute_btn.clicked.connect(self._do_execute)
        self.execute_btn.setEnabled(False)
        self.execute_btn.setStyleSheet("QPushButton { background-color: #4CAF50; color: white; font-weight: bold; padding: 8px 16px; }")
        bottom_layout.addWidget(self.execute_btn)
        layout.addLayout(bottom_layout)

        self.status_label = QLabel("")
        layout.addWidget(self.status_label)
        self.statusBar().showMessage("Ready")

    def _browse_directory(self):
        """Browse and select directory"""
        directory = QFileDialog.getExistingDirectory(self, "Select Directory")
        if directory:
            self.dir_edit.setText(directory)
            self._do_scan()

    def _do_scan(self):
        """Load files of the selected directory"""
        directory = self.dir_edit.text().strip()
        path = Path(directory)
        if not directory or not path.is_dir():
            QMessageBox.warning(self, "Warning", f"Directory does not exist: {directory}")
            return

        self.scan_btn.setEnabled(False)
        self.scan_worker = ScanWorker(
            path,
            recursive=self.recursive_check.isChecked(),
            include_hidden=self.options.include_hidden,
            ignore_dirs=self.options.ignore_dirs,
        )
        self.scan_worker.finished.connect(self._on_scan_finished)
        self.scan_worker.error.connect(self._on_scan_error)
        self.scan_worker.start()

    @Slot(list)
    def _on_scan_finished(self, files: List[FileEntry]):
        self.files = files
        self.scan_btn.setEnabled(True)
        self.statusBar().showMessage(f"Loaded {len(files)} files")
        self._recompute()

    @Slot(str)
    def _on_scan_error(self, error: str):
        self.scan_btn.setEnabled(True)
        QMessageBox.critical(self, "Error", f"Loading failed: {error}")

    def _recompute(self, *_):
        """Recompute the whole preview from current inputs"""
        state = self.session.recompute(self.files, self.rule_panel.field, self.rule_panel.params())
        if self.session.error:
            # Previous preview stays on screen
            self.status_label.setText(f"Error: {self.session.error}")
            self.execute_btn.setEnabled(False)
            return

        self.table.setRowCount(len(state.rows))
        for row, (entry, verdict) in enumerate(state.rows):
            self.table.setItem(row, 0, QTableWidgetItem(entry.original))
            self.table.setItem(row, 1, QTableWidgetItem(entry.proposed))
            text = verdict.describe()
            if entry.note:
                text = f"{text} ({entry.note})"
            status_item = QTableWidgetItem(text)
            status_item.setForeground(STATUS_COLORS[verdict.kind])
            self.table.setItem(row, 2, status_item)

        ok_count = sum(1 for v in state.verdicts if v.kind == VerdictKind.OK)
        if state.blocked_count:
            self.status_label.setText(f"{state.blocked_count} conflicts must be resolved before renaming")
        else:
            self.status_label.setText(f"Will perform {ok_count} rename operations")
        self.execute_btn.setEnabled(state.executable and not batch_in_progress())

    def _start_batch(self, plan):
        self.execute_btn.setEnabled(False)
        self.undo_btn.setEnabled(False)
        self.scan_btn.setEnabled(False)
        self.progress_bar.setVisible(True)
        self.progress_bar.setRange(0, plan.total_count * 2)

        log_dir = None
        if self.options.backup_log and self.dir_edit.text().strip():
            log_dir = Path(self.dir_edit.text().strip()) / ".rename_backup"
        self.rename_worker = RenameWorker(plan, log_dir=log_dir)
        self.rename_worker.progress.connect(self._on_rename_progress)
        self.rename_worker.finished.connect(self._on_rename_finished)
        self.rename_worker.error.connect(self._on_rename_error)
        self.rename_worker.start()

    def _do_execute(self):
        """Execute rename"""
        try:
            plan = self.session.state.plan()
        except PlanBlocked as e:
            QMessageBox.warning(self, "Warning", str(e))
            return
        if not plan.entries:
            return

        reply = QMessageBox.question(
            self, "Confirm",
            f"Are you sure you want to execute {plan.total_count} rename operations?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if reply != QMessageBox.StandardButton.Yes:
            return
        self._start_batch(plan)

    def _do_undo(self):
        """Rename the files of the last batch back"""
        if not self.last_result:
            return
        plan = self.last_result.undo_plan()
        if plan.entries:
            self._start_batch(plan)

    @Slot(int, int, str)
    def _on_rename_progress(self, current: int, total: int, msg: str):
        self.progress_bar.setValue(current)
        self.status_label.setText(msg)

    @Slot(object)
    def _on_rename_finished(self, result: RenameResult):
        self.progress_bar.setVisible(False)
        self.scan_btn.setEnabled(True)
        self.last_result = result
        self.undo_btn.setEnabled(result.success_count > 0)

        msg = f"Rename complete!\n\nSuccess: {result.success_count}\nFailed: {result.failed_count}"
        if result.failed_count > 0:
            msg += "\n\nFailure Details:\n"
            for o in result.failed[:5]:
                msg += f"  {o.src.name}: {o.error}\n"
            if len(result.failed) > 5:
                msg += f"  ... and {len(result.failed) - 5} more failures"
        QMessageBox.information(self, "Complete", msg)

        # Names on disk changed, reload
        self._do_scan()

    @Slot(str)
    def _on_rename_error(self, error: str):
        self.progress_bar.setVisible(False)
        self.scan_btn.setEnabled(True)
        QMessageBox.critical(self, "Error", f"Execution failed: {error}")
        self._recompute()
