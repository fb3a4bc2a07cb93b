#!/usr/bin/env python3
"""
Migrate recorded signals from legacy names to the TelemetryDeck.* names.

Fixes applied per signal:
1. signal type renamed → new type
2. signal type deleted → whole signal dropped
3. parameter key renamed → new key (existing new key wins)
4. parameter key deleted → key dropped

Usage:
    python3 scripts/migrate_signals.py recorded.yaml              # rewrite in place
    python3 scripts/migrate_signals.py recorded.json -o out.yaml
    python3 scripts/migrate_signals.py recorded.yaml --dry-run
"""

import argparse
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from signal_renames import Deleted, RenameTable, TableError, load_table
from signals import Signal, load_signals


@dataclass
class MigrationResult:
    original: Signal
    signal: Optional[Signal]
    changes: list[str] = field(default_factory=list)

    @property
    def dropped(self) -> bool:
        return self.signal is None

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def migrate_parameters(params: dict, table: RenameTable, changes: list[str]) -> dict:
    """Rename/drop legacy parameter keys, keeping the input key order."""
    # Keys not renamed by a parameter row win over a legacy key mapping onto them.
    current = {key for key in params if table.get_entry(key, "parameter") is None}

    migrated = {}
    for key, value in params.items():
        result = table.lookup(key, "parameter")
        if result is None:
            migrated[key] = value
            continue
        if isinstance(result, Deleted):
            changes.append(f"parameter '{key}' dropped ({result.reason})")
            continue
        if result in current or result in migrated:
            changes.append(f"parameter '{key}' dropped, '{result}' already set")
            continue
        migrated[result] = value
        changes.append(f"parameter '{key}' → '{result}'")
    return migrated


def migrate_signal(signal: Signal, table: RenameTable) -> MigrationResult:
    changes = []

    name = signal.name
    result = table.lookup(name, "signal")
    if isinstance(result, Deleted):
        changes.append(f"signal '{name}' dropped ({result.reason})")
        return MigrationResult(signal, None, changes)
    if result is not None:
        changes.append(f"signal '{name}' → '{result}'")
        name = result

    params = migrate_parameters(signal.parameters, table, changes)
    return MigrationResult(signal, Signal(name, params), changes)


def migrate_signals(signals, table: RenameTable) -> tuple[list[Signal], list[MigrationResult]]:
    """Returns (kept signals, per-signal results)."""
    results = [migrate_signal(s, table) for s in signals]
    kept = [r.signal for r in results if not r.dropped]
    return kept, results


def save_signals(path: Path, signals: list[Signal]):
    data = {"signals": [s.to_dict() for s in signals]}
    with open(path, "w", encoding="utf-8") as f:
        if path.suffix == ".json":
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        else:
            yaml.dump(
                data, f,
                default_flow_style=False,
                allow_unicode=True,
                width=120,
                sort_keys=False,
            )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Migrate signals to TelemetryDeck.* names")
    parser.add_argument("input", type=Path, help="YAML or JSON file of signals")
    parser.add_argument("-o", "--output", type=Path, help="Output file (default: overwrite input)")
    parser.add_argument("--table", help="Path to the rename table")
    parser.add_argument("--dry-run", action="store_true", help="Report changes without writing")
    args = parser.parse_args(argv)

    try:
        table = load_table(args.table)
        print(f"Loading {args.input}...")
        signals = load_signals(args.input)
    except (TableError, ValueError, OSError) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Found {len(signals)} signals, {len(table)} rename entries")

    kept, results = migrate_signals(signals, table)

    total_changes = 0
    for idx, res in enumerate(results):
        if not res.changed:
            continue
        total_changes += len(res.changes)
        print(f"  [{idx}] {res.original.name}:")
        for change in res.changes:
            print(f"    - {change}")

    if total_changes == 0:
        print("\nNo changes needed. Signals already use current names.")
        return 0

    dropped = len(results) - len(kept)
    print(f"\nTotal changes: {total_changes} ({dropped} signals dropped)")

    if args.dry_run:
        print("Dry run, nothing written.")
        return 0

    output = args.output or args.input
    print(f"Saving to {output}...")
    save_signals(output, kept)
    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
