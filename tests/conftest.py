"""Shared pytest fixtures for pomotimer tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from pomotimer.timer.engine import SessionEngine

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path, monkeypatch):
    """Keep settings and the sound cache out of the real home directory."""
    monkeypatch.setattr(
        "pomotimer.settings.SETTINGS_PATH", tmp_path / "settings.json",
    )
    monkeypatch.setattr(
        "pomotimer.audio.sounds.SOUNDS_DIR", tmp_path / "sounds",
    )
    yield tmp_path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(qapp, clock):
    """Fresh SessionEngine on the fake clock with default settings."""
    return SessionEngine(clock=clock)


@pytest.fixture
def make_engine(qapp, clock):
    """Factory for engines with custom settings on the shared fake clock."""
    def _make(**settings):
        return SessionEngine(settings, clock=clock)
    return _make
