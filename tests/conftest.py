"""
Shared pytest configuration and fixtures for the bulk_renamer test suite.
"""

import os
import sys

# Use a headless Qt platform unless the environment chooses one.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from bulk_renamer.core import FileEntry, scan_directory


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "gui: mark test as requiring a Qt platform")


def pytest_collection_modifyitems(session, config, items):
    """Skip GUI tests in CI."""
    _ = session
    _ = config

    if "CI" in os.environ or "GITHUB_ACTIONS" in os.environ:
        skip_gui = pytest.mark.skip(reason="GUI tests don't work on CI")
        for item in items:
            if "gui" in item.keywords:
                item.add_marker(skip_gui)


@pytest.fixture
def make_entry(tmp_path):
    """Factory for FileEntry objects that need not exist on disk."""

    def _make(name, **kwargs):
        return FileEntry(path=tmp_path / name, name=name, **kwargs)

    return _make


@pytest.fixture
def make_files(tmp_path):
    """Create files in tmp_path and return the scanned entries, sorted by name."""

    def _make(*names, content="x"):
        for name in names:
            (tmp_path / name).write_text(content, encoding="utf-8")
        return scan_directory(tmp_path, include_hidden=True)

    return _make
