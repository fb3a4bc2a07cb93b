"""Tests for migrating recorded signals to current names."""

import json

import yaml

from migrate_signals import main, migrate_signal, migrate_signals
from signal_renames import parse_table
from signals import Signal


class TestMigrateSignal:
    def test_unchanged_signal_has_no_changes(self, small_table):
        signal = Signal("Settings.opened", {"source": "menu"})
        result = migrate_signal(signal, small_table)
        assert not result.changed
        assert result.signal == signal

    def test_signal_and_parameters_renamed(self, small_table):
        signal = Signal("newSessionBegan", {"appVersion": "2.0", "buildNumber": "41", "screen": "home"})
        result = migrate_signal(signal, small_table)
        assert result.signal == Signal("TelemetryDeck.Session.started", {
            "screen": "home",
            "TelemetryDeck.AppInfo.version": "2.0",
            "TelemetryDeck.AppInfo.buildNumber": "41",
        })
        assert result.changes[0] == "signal 'newSessionBegan' → 'TelemetryDeck.Session.started'"
        assert len(result.changes) == 3

    def test_deleted_signal_is_dropped(self, small_table):
        result = migrate_signal(Signal("AppBackground", {"appVersion": "1"}), small_table)
        assert result.dropped
        assert result.signal is None
        assert result.changes == ["signal 'AppBackground' dropped (was sending too many signals)"]

    def test_deleted_parameter_is_dropped(self, small_table):
        result = migrate_signal(Signal("Settings.opened", {"legacyFlag": True}), small_table)
        assert result.signal.parameters == {}
        assert "parameter 'legacyFlag' dropped (no longer collected)" in result.changes

    def test_existing_new_key_wins(self, small_table):
        signal = Signal("Settings.opened", {
            "appVersion": "old",
            "TelemetryDeck.AppInfo.version": "new",
        })
        result = migrate_signal(signal, small_table)
        assert result.signal.parameters == {"TelemetryDeck.AppInfo.version": "new"}
        assert "already set" in result.changes[0]

    def test_signal_row_leaves_parameter_key_alone(self, small_table):
        result = migrate_signal(Signal("Settings.opened", {"newSessionBegan": "x"}), small_table)
        assert result.signal.parameters == {"newSessionBegan": "x"}
        assert not result.changed

    def test_parameter_row_leaves_signal_type_alone(self, small_table):
        result = migrate_signal(Signal("appVersion"), small_table)
        assert result.signal.name == "appVersion"
        assert not result.changed

    def test_deleted_signal_row_does_not_drop_parameter(self, small_table):
        result = migrate_signal(Signal("Settings.opened", {"AppBackground": True}), small_table)
        assert result.signal.parameters == {"AppBackground": True}

    def test_key_order_preserved(self, small_table):
        signal = Signal("Settings.opened", {"appVersion": "2.0", "screen": "home", "buildNumber": "41"})
        result = migrate_signal(signal, small_table)
        assert list(result.signal.parameters) == [
            "TelemetryDeck.AppInfo.version",
            "screen",
            "TelemetryDeck.AppInfo.buildNumber",
        ]

    def test_first_legacy_key_wins_shared_target(self):
        table = parse_table({"parameters": [
            {"old": "a", "new": "TelemetryDeck.A.b"},
            {"old": "aa", "new": "TelemetryDeck.A.b"},
        ]})
        result = migrate_signal(Signal("Settings.opened", {"aa": 1, "a": 2}), table)
        assert result.signal.parameters == {"TelemetryDeck.A.b": 1}
        assert result.changes[-1] == "parameter 'a' dropped, 'TelemetryDeck.A.b' already set"

    def test_original_is_untouched(self, small_table):
        signal = Signal("newSessionBegan", {"appVersion": "2.0"})
        migrate_signal(signal, small_table)
        assert signal == Signal("newSessionBegan", {"appVersion": "2.0"})


class TestMigrateSignals:
    def test_drops_deleted_and_keeps_order(self, small_table):
        signals = [
            Signal("Settings.opened"),
            Signal("AppBackground"),
            Signal("newSessionBegan"),
        ]
        kept, results = migrate_signals(signals, small_table)
        assert [s.name for s in kept] == ["Settings.opened", "TelemetryDeck.Session.started"]
        assert len(results) == 3


class TestCli:
    def _write(self, path, signals):
        path.write_text(yaml.safe_dump({"signals": signals}, sort_keys=False))

    def test_rewrites_in_place(self, tmp_path, table):
        path = tmp_path / "recorded.yaml"
        self._write(path, [
            {"type": "newSessionBegan", "payload": {"appVersion": "1.2"}},
            {"type": "AppBackground", "payload": {}},
        ])
        assert main([str(path), "--table", str(table.source)]) == 0
        data = yaml.safe_load(path.read_text())
        assert data == {"signals": [
            {"type": "TelemetryDeck.Session.started", "payload": {"TelemetryDeck.AppInfo.version": "1.2"}},
        ]}

    def test_json_output(self, tmp_path, table):
        src = tmp_path / "recorded.yaml"
        out = tmp_path / "migrated.json"
        self._write(src, [{"type": "Settings.opened", "payload": {"platform": "iOS"}}])
        assert main([str(src), "-o", str(out), "--table", str(table.source)]) == 0
        data = json.loads(out.read_text())
        assert data["signals"][0]["payload"] == {"TelemetryDeck.Device.platform": "iOS"}

    def test_dry_run_writes_nothing(self, tmp_path, table, capsys):
        path = tmp_path / "recorded.yaml"
        self._write(path, [{"type": "newSessionBegan"}])
        before = path.read_text()
        assert main([str(path), "--dry-run", "--table", str(table.source)]) == 0
        assert path.read_text() == before
        assert "Dry run" in capsys.readouterr().out

    def test_nothing_to_do(self, tmp_path, table, capsys):
        path = tmp_path / "recorded.yaml"
        self._write(path, [{"type": "Settings.opened"}])
        assert main([str(path), "--table", str(table.source)]) == 0
        assert "No changes needed" in capsys.readouterr().out

    def test_malformed_yaml(self, tmp_path, table, capsys):
        path = tmp_path / "recorded.yaml"
        path.write_text("- type: [unclosed\n")
        assert main([str(path), "--table", str(table.source)]) == 1
        assert "ERROR:" in capsys.readouterr().out
        assert path.read_text() == "- type: [unclosed\n"
