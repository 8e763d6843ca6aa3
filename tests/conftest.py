import os
import pathlib
import sys
from datetime import date

import pytest

# Widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Ensure project root is in sys.path
repo_root = pathlib.Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

try:
    from PySide6.QtWidgets import QApplication
except ImportError:
    QApplication = None


@pytest.fixture(scope="session")
def qapp():
    """
    Ensure QApplication is instantiated only once.
    """
    if QApplication is None:
        yield None
        return

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture(autouse=True)
def clean_timelane_env(monkeypatch):
    """
    Removes TIMELANE_* variables so a developer's shell or .env file
    never leaks into configuration tests.
    """
    from dataclasses import fields

    from timelane.app.constants import ENV_PREFIX
    from timelane.core.timeline_config import TimelineConfig

    names = {f"{ENV_PREFIX}{f.name.upper()}" for f in fields(TimelineConfig)}
    names.update(key for key in os.environ if key.startswith(ENV_PREFIX))
    for name in names:
        # Recorded as unset, so values loaded from .env files are dropped too
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def sample_items():
    """The small hand-written item set used by the demo."""
    from timelane.core.sample_data import SAMPLE_ITEMS

    return [dict(item) for item in SAMPLE_ITEMS]


@pytest.fixture
def fixed_today():
    return date(2025, 6, 1)
