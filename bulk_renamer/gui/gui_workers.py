"""
gui_workers.py - GUI Worker Threads

Runs scans and rename batches off the UI thread. Only one rename batch may
run at a time in the process.
"""

import logging
import threading
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QThread, Signal, QObject

from ..core import RenamePlan, execute_rename, scan_directory, scan_recursive

logger = logging.getLogger(__name__)

# Held for the whole duration of a rename batch
_batch_lock = threading.Lock()


def batch_in_progress() -> bool:
    """Whether a rename batch is currently running"""
    return _batch_lock.locked()


class ScanWorker(QThread):
    """File scanning worker thread"""

    # Signals
    progress = Signal(str)          # Progress message
    finished = Signal(list)         # Complete, returns file list
    error = Signal(str)             # Error message

    def __init__(
        self,
        directory: Path,
        recursive: bool = False,
        include_hidden: bool = False,
        ignore_dirs: Optional[List[str]] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.directory = directory
        self.recursive = recursive
        self.include_hidden = include_hidden
        self.ignore_dirs = ignore_dirs

    def run(self):
        try:
            if self.recursive:
                files = scan_recursive(
                    self.directory,
                    include_hidden=self.include_hidden,
                    ignore_dirs=self.ignore_dirs,
                    progress_callback=self.progress.emit,
                )
            else:
                files = scan_directory(self.directory, include_hidden=self.include_hidden)
            self.finished.emit(files)
        except (OSError, ValueError) as e:
            logger.warning("Scan of %s failed: %s", self.directory, e)
            self.error.emit(str(e))


class RenameWorker(QThread):
    """Rename execution worker thread"""

    # Signals
    progress = Signal(int, int, str)    # current, total, message
    finished = Signal(object)           # RenameResult
    error = Signal(str)                 # Error message

    def __init__(
        self,
        plan: RenamePlan,
        dry_run: bool = False,
        log_dir: Optional[Path] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.plan = plan
        self.dry_run = dry_run
        self.log_dir = log_dir

    def run(self):
        if not _batch_lock.acquire(blocking=False):
            self.error.emit("Another rename batch is still running")
            return
        try:
            result = execute_rename(
                self.plan,
                dry_run=self.dry_run,
                progress_callback=self.progress.emit,
                log_dir=self.log_dir,
            )
        except OSError as e:
            # Only log writing can raise here; per-file errors are in the result
            logger.error("Rename batch failed: %s", e)
            self.error.emit(str(e))
            return
        finally:
            _batch_lock.release()

        self.finished.emit(result)
