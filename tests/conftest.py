"""Shared fixtures for the rename table tests."""

from pathlib import Path

import pytest

from signal_renames import load_table, parse_table

SHIPPED_TABLE = Path(__file__).parent.parent / "data" / "signal-renames.yaml"


@pytest.fixture
def table():
    """The table shipped in data/signal-renames.yaml."""
    return load_table(SHIPPED_TABLE)


@pytest.fixture
def small_table():
    """A hand-sized table covering renames and deletions of both kinds."""
    return parse_table({
        "signals": [
            {"old": "newSessionBegan", "new": "TelemetryDeck.Session.started"},
            {"old": "AppBackground", "deleted": "was sending too many signals"},
        ],
        "parameters": [
            {"old": "appVersion", "new": "TelemetryDeck.AppInfo.version"},
            {"old": "buildNumber", "new": "TelemetryDeck.AppInfo.buildNumber"},
            {"old": "legacyFlag", "deleted": "no longer collected"},
        ],
    })


@pytest.fixture
def write_table(tmp_path):
    """Write YAML text to a fresh table file and return its path."""
    def _write(text: str) -> Path:
        path = tmp_path / "renames.yaml"
        path.write_text(text, encoding="utf-8")
        return path
    return _write
