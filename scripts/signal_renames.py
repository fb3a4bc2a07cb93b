#!/usr/bin/env python3
"""
Signal & parameter rename table: load, look up, validate.

The table lives in data/signal-renames.yaml and maps every legacy signal type
or parameter key to its TelemetryDeck.* replacement, or marks it deleted with
a reason.

Usage:
    python3 scripts/signal_renames.py newSessionBegan appVersion
    python3 scripts/signal_renames.py --list
    python3 scripts/signal_renames.py --validate
    python3 scripts/signal_renames.py --validate --strict  # treat warnings as errors
    python3 scripts/signal_renames.py --table path/to/renames.yaml --list

Config:
    SIGNAL_RENAMES_PATH  override the table location
"""

import argparse
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Optional, Union

import yaml

# --- CONFIG ---
SCRIPT_DIR = Path(__file__).parent.resolve()
DATA_DIR = SCRIPT_DIR / ".." / "data"
DEFAULT_TABLE_PATH = DATA_DIR / "signal-renames.yaml"

RESERVED_PREFIX = "TelemetryDeck."
SECTIONS = {"signals": "signal", "parameters": "parameter"}

DOTTED_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9]*(\.[A-Za-z][A-Za-z0-9]*)+$")


class TableError(ValueError):
    """The rename table file is structurally broken."""


@dataclass(frozen=True)
class Deleted:
    """Marker for an identifier that was removed rather than renamed."""

    reason: str

    def __str__(self) -> str:
        return f"deleted ({self.reason})"


@dataclass(frozen=True)
class MigrationEntry:
    old_name: str
    new_name: Union[str, Deleted]
    kind: str

    @property
    def is_deleted(self) -> bool:
        return isinstance(self.new_name, Deleted)


class RenameTable:
    """Read-only lookup over MigrationEntry rows, keyed by old name."""

    def __init__(self, entries, source: Optional[Path] = None):
        by_name = {}
        for entry in entries:
            if entry.old_name in by_name:
                raise TableError(f"duplicate old name: {entry.old_name}")
            by_name[entry.old_name] = entry
        self._entries = MappingProxyType(by_name)
        self.source = source

    def lookup(self, old_name: str, kind: Optional[str] = None) -> Union[str, Deleted, None]:
        """Replacement string, Deleted marker, or None when never renamed.

        With `kind`, rows of the other kind count as not found.
        """
        entry = self.get_entry(old_name, kind)
        if entry is None:
            return None
        return entry.new_name

    def get_entry(self, old_name: str, kind: Optional[str] = None) -> Optional[MigrationEntry]:
        entry = self._entries.get(old_name)
        if entry is None or (kind is not None and entry.kind != kind):
            return None
        return entry

    def __contains__(self, old_name) -> bool:
        return old_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[MigrationEntry]:
        return iter(self._entries.values())

    def signals(self) -> list[MigrationEntry]:
        return [e for e in self if e.kind == "signal"]

    def parameters(self) -> list[MigrationEntry]:
        return [e for e in self if e.kind == "parameter"]

    def replacements(self) -> list[MigrationEntry]:
        return [e for e in self if not e.is_deleted]

    def deletions(self) -> list[MigrationEntry]:
        return [e for e in self if e.is_deleted]

    def __repr__(self) -> str:
        return f"RenameTable({len(self)} entries, source={self.source})"


# ── Loading ──────────────────────────────────────────────────────────────────

_TABLE_CACHE: dict[Path, RenameTable] = {}


def resolve_table_path(path=None) -> Path:
    """Explicit path, then $SIGNAL_RENAMES_PATH, then data/signal-renames.yaml."""
    if path is None:
        path = os.getenv("SIGNAL_RENAMES_PATH") or DEFAULT_TABLE_PATH
    return Path(path).resolve()


def load_yaml(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def parse_row(row, kind: str, index: int) -> MigrationEntry:
    """Turn one `{old, new|deleted}` mapping into a MigrationEntry."""
    where = f"{kind}[{index}]"
    if not isinstance(row, dict):
        raise TableError(f"{where}: expected a mapping, got {type(row).__name__}")

    old = row.get("old")
    if not isinstance(old, str) or not old:
        raise TableError(f"{where}: missing 'old'")

    has_new = "new" in row
    has_deleted = "deleted" in row
    if has_new == has_deleted:
        raise TableError(f"{where} [{old}]: needs exactly one of 'new' or 'deleted'")

    if has_new:
        new = row["new"]
        if not isinstance(new, str) or not new:
            raise TableError(f"{where} [{old}]: 'new' must be a non-empty string")
        return MigrationEntry(old, new, kind)

    reason = row["deleted"]
    if reason is None:
        reason = ""
    return MigrationEntry(old, Deleted(str(reason)), kind)


def parse_table(data, source: Optional[Path] = None) -> RenameTable:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TableError(f"top level must be a mapping, got {type(data).__name__}")

    unknown = set(data) - set(SECTIONS)
    if unknown:
        raise TableError(f"unknown sections: {', '.join(sorted(unknown))}")

    entries = []
    for section, kind in SECTIONS.items():
        rows = data.get(section) or []
        if not isinstance(rows, list):
            raise TableError(f"'{section}' must be a list")
        for idx, row in enumerate(rows):
            entries.append(parse_row(row, kind, idx))
    return RenameTable(entries, source=source)


def load_table(path=None, use_cache: bool = True) -> RenameTable:
    """Load (and cache) the rename table."""
    resolved = resolve_table_path(path)
    if use_cache and resolved in _TABLE_CACHE:
        return _TABLE_CACHE[resolved]

    if not resolved.exists():
        raise TableError(f"rename table not found: {resolved}")

    try:
        data = load_yaml(resolved)
    except yaml.YAMLError as e:
        raise TableError(f"{resolved}: invalid YAML: {e}") from e

    table = parse_table(data, source=resolved)
    _TABLE_CACHE[resolved] = table
    return table


def lookup(old_name: str, table: Optional[RenameTable] = None) -> Union[str, Deleted, None]:
    """Look up a legacy identifier in the (default) rename table."""
    if table is None:
        table = load_table()
    return table.lookup(old_name)


# ── Validation ───────────────────────────────────────────────────────────────

def is_dotted_name(name: str) -> bool:
    """`Namespace.Entity.action` style: two or more alphanumeric segments."""
    return bool(DOTTED_NAME_RE.match(name))


def validate_table(table: RenameTable) -> tuple[list[str], list[str]]:
    """Returns (errors, warnings)."""
    errors = []
    warnings = []

    seen_targets = {}
    for entry in table:
        prefix = f"{entry.kind} [{entry.old_name}]"

        if entry.is_deleted:
            if not entry.new_name.reason.strip():
                errors.append(f"{prefix}: deleted without a reason")
            continue

        new = entry.new_name
        if not new.startswith(RESERVED_PREFIX):
            errors.append(f"{prefix}: replacement '{new}' does not start with '{RESERVED_PREFIX}'")
        if new == entry.old_name:
            errors.append(f"{prefix}: renamed to itself")
        if new in table:
            errors.append(f"{prefix}: replacement '{new}' is itself renamed (chained rename)")
        if not is_dotted_name(new):
            warnings.append(f"{prefix}: replacement '{new}' is not a dotted Namespace.Entity.name")

        if new in seen_targets:
            warnings.append(f"{prefix}: same replacement as [{seen_targets[new]}] ({new})")
        else:
            seen_targets[new] = entry.old_name

    return errors, warnings


# ── CLI ──────────────────────────────────────────────────────────────────────

def format_result(old_name: str, result) -> str:
    if result is None:
        return f"{old_name}: not found (never renamed)"
    return f"{old_name} → {result}"


def print_table(table: RenameTable):
    for title, entries in (("Signals", table.signals()), ("Parameters", table.parameters())):
        print(f"\n{title} ({len(entries)}):")
        width = max((len(e.old_name) for e in entries), default=0)
        for e in entries:
            print(f"  {e.old_name:<{width}}  →  {e.new_name}")


def report(errors: list[str], warnings: list[str]):
    if warnings:
        print(f"\n⚠ {len(warnings)} warnings:")
        for w in warnings[:50]:
            print(f"  WARN: {w}")
        if len(warnings) > 50:
            print(f"  ... and {len(warnings) - 50} more warnings")

    if errors:
        print(f"\n✗ {len(errors)} errors:")
        for e in errors[:50]:
            print(f"  ERR: {e}")
        if len(errors) > 50:
            print(f"  ... and {len(errors) - 50} more errors")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Look up legacy TelemetryDeck signal/parameter names")
    parser.add_argument("names", nargs="*", help="Legacy identifiers to look up")
    parser.add_argument("--table", help="Path to the rename table (default: data/signal-renames.yaml)")
    parser.add_argument("--list", action="store_true", help="Print the whole table")
    parser.add_argument("--validate", action="store_true", help="Validate the table")
    parser.add_argument("--strict", action="store_true", help="Treat warnings as errors")
    args = parser.parse_args(argv)

    try:
        table = load_table(args.table)
    except TableError as e:
        print(f"ERROR: {e}")
        return 1

    if not (args.names or args.list or args.validate):
        parser.print_help()
        return 0

    for name in args.names:
        print(format_result(name, table.lookup(name)))

    if args.list:
        print(f"Loaded {table.source}: {len(table.signals())} signals, {len(table.parameters())} parameters")
        print_table(table)

    if args.validate:
        errors, warnings = validate_table(table)
        report(errors, warnings)
        total_issues = len(errors) + (len(warnings) if args.strict else 0)
        if total_issues:
            print(f"\n✗ Validation failed: {len(errors)} errors, {len(warnings)} warnings")
            return 1
        print(f"\n✓ Validation passed! {len(table)} entries ({len(warnings)} warnings)")

    return 0


if __name__ == "__main__":
    sys.exit(main())
