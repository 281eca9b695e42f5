"""
Shared pytest configuration.

Widgets render offscreen and the logger stays off the filesystem; both
must be set before PyQt6 or src.utils.message is imported.
"""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("TRACKSHELF_LOG_TO_FILE", "0")

import pytest


@pytest.fixture
def qapp():
    """Ensure QApplication exists for widgets, QThread and signals."""
    from PyQt6.QtWidgets import QApplication
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app
