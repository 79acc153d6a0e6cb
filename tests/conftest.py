"""Shared pytest fixtures.

Qt runs on the offscreen platform so the suite works headless. Every test
gets its own settings directory so a developer's settings.toml never leaks
into results.
"""
from __future__ import annotations

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from PyQt6.QtWidgets import QApplication

from settings import SettingsManager, set_settings


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """Provide a single QApplication for the entire test session."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path):
    """Point the settings singleton at a throwaway directory."""
    from canvas.painting import _CachedPaintSettings

    manager = SettingsManager(settings_dir=tmp_path / "config")
    set_settings(manager)
    _CachedPaintSettings.invalidate()
    yield manager
    set_settings(None)
    _CachedPaintSettings.invalidate()
