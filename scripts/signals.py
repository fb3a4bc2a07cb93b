#!/usr/bin/env python3
"""
Signal shape and naming checks.

A signal is a type name plus flat parameters (string keys, scalar values).
On the wire it looks like {"type": "...", "payload": {...}}.

Usage:
    python3 scripts/signals.py signals.yaml
    python3 scripts/signals.py signals.json --strict  # treat warnings as errors
"""

import argparse
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from signal_renames import (
    RESERVED_PREFIX,
    Deleted,
    RenameTable,
    TableError,
    is_dotted_name,
    load_table,
    report,
)

SCALAR_TYPES = (str, int, float, bool)


@dataclass
class Signal:
    name: str
    parameters: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "Signal":
        """Accepts the wire shape ({type, payload}) or {name, parameters}."""
        if not isinstance(data, dict):
            raise ValueError(f"signal must be a mapping, got {type(data).__name__}")
        name = data.get("type", data.get("name"))
        if name is None:
            raise ValueError("signal has no 'type'")
        params = data.get("payload", data.get("parameters")) or {}
        if not isinstance(params, dict):
            raise ValueError(f"signal [{name}]: payload must be a mapping")
        return cls(str(name), dict(params))

    def to_dict(self) -> dict:
        return {"type": self.name, "payload": dict(self.parameters)}


def is_sdk_name(name: str) -> bool:
    return name.startswith(RESERVED_PREFIX)


def describe_legacy(name: str, result) -> str:
    if isinstance(result, Deleted):
        return f"'{name}' was deleted: {result.reason}"
    return f"'{name}' was renamed to '{result}'"


def check_signal(signal: Signal, table: Optional[RenameTable] = None,
                 sdk: bool = False) -> tuple[list[str], list[str]]:
    """Returns (errors, warnings).

    `sdk=True` marks a signal emitted by the SDK itself, which is allowed to
    use the reserved TelemetryDeck. namespace.
    """
    errors = []
    warnings = []
    prefix = f"signal [{signal.name}]"

    if not signal.name:
        errors.append("signal: empty type")
    else:
        if not is_dotted_name(signal.name):
            warnings.append(f"{prefix}: type is not in Namespace.Entity.action form")
        if is_sdk_name(signal.name) and not sdk:
            warnings.append(f"{prefix}: uses the reserved '{RESERVED_PREFIX}' namespace")
        if table is not None and table.get_entry(signal.name, "signal") is not None:
            warnings.append(f"{prefix}: {describe_legacy(signal.name, table.lookup(signal.name))}")

    for key, value in signal.parameters.items():
        if not isinstance(key, str) or not key:
            errors.append(f"{prefix}: empty or non-string parameter key {key!r}")
            continue
        if value is None or not isinstance(value, SCALAR_TYPES):
            errors.append(f"{prefix}: parameter '{key}' is {type(value).__name__}, should be a scalar")
        if is_sdk_name(key) and not sdk:
            warnings.append(f"{prefix}: parameter '{key}' uses the reserved '{RESERVED_PREFIX}' namespace")
        if table is not None and table.get_entry(key, "parameter") is not None:
            warnings.append(f"{prefix}: parameter {describe_legacy(key, table.lookup(key))}")

    return errors, warnings


def load_signals(path: Path) -> list[Signal]:
    """Read a YAML/JSON file holding a list of signals or {signals: [...]}."""
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix == ".json":
            data = json.load(f)
        else:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"{path}: invalid YAML: {e}") from e

    if isinstance(data, dict):
        data = data.get("signals", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of signals")
    return [Signal.from_dict(item) for item in data]


def main(argv=None):
    parser = argparse.ArgumentParser(description="Check signals against naming conventions")
    parser.add_argument("input", type=Path, help="YAML or JSON file of signals")
    parser.add_argument("--table", help="Path to the rename table")
    parser.add_argument("--sdk", action="store_true", help="Signals come from the SDK (allow TelemetryDeck.*)")
    parser.add_argument("--strict", action="store_true", help="Treat warnings as errors")
    args = parser.parse_args(argv)

    try:
        table = load_table(args.table)
        print(f"Loading {args.input}...")
        signals = load_signals(args.input)
    except (TableError, ValueError, OSError) as e:
        print(f"ERROR: {e}")
        return 1

    errors = []
    warnings = []
    for signal in signals:
        errs, warns = check_signal(signal, table, sdk=args.sdk)
        errors.extend(errs)
        warnings.extend(warns)

    report(errors, warnings)

    total_issues = len(errors) + (len(warnings) if args.strict else 0)
    if total_issues:
        print(f"\n✗ {len(signals)} signals checked: {len(errors)} errors, {len(warnings)} warnings")
        return 1
    print(f"\n✓ {len(signals)} signals checked ({len(warnings)} warnings)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
