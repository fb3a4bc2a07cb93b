#!/usr/bin/env python3
"""
Find legacy signal/parameter names used as string literals in a source tree.

Only whole literals match: "appVersion" is reported, "appVersionLabel" is not.
With --fix, renamed literals are rewritten in place. Deleted names are only
reported since removing the call that sends them is a manual job.

Usage:
    python3 scripts/find_legacy_names.py Sources/
    python3 scripts/find_legacy_names.py app/ --ext .kt --ext .java
    python3 scripts/find_legacy_names.py Sources/ --fix
"""

import argparse
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from signal_renames import Deleted, RenameTable, TableError, load_table

DEFAULT_EXTENSIONS = [".swift", ".kt", ".dart", ".js", ".ts", ".md"]
SKIP_DIRS = {".git", "node_modules", "build", ".build", ".dart_tool", "Pods", "__pycache__"}

STRING_LITERAL_RE = re.compile(r"""(?P<quote>["'])(?P<name>[A-Za-z][A-Za-z0-9_.]*)(?P=quote)""")


@dataclass
class Finding:
    path: str
    line: int
    column: int
    old_name: str
    new_name: Union[str, Deleted]

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}: '{self.old_name}' → {self.new_name}"


def find_in_text(text: str, table: RenameTable, path: str = "<text>") -> list[Finding]:
    findings = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        for m in STRING_LITERAL_RE.finditer(line):
            name = m.group("name")
            result = table.lookup(name)
            if result is not None:
                findings.append(Finding(path, lineno, m.start("name") + 1, name, result))
    return findings


def rewrite_text(text: str, table: RenameTable) -> tuple[str, int]:
    """Replace renamed literals. Returns (new_text, replacements)."""
    count = 0

    def _sub(m):
        nonlocal count
        result = table.lookup(m.group("name"))
        if result is None or isinstance(result, Deleted):
            return m.group(0)
        count += 1
        quote = m.group("quote")
        return f"{quote}{result}{quote}"

    return STRING_LITERAL_RE.sub(_sub, text), count


def iter_source_files(root: Path, extensions: list[str]):
    if root.is_file():
        yield root
        return
    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.suffix not in extensions:
            continue
        if any(part in SKIP_DIRS for part in path.relative_to(root).parts):
            continue
        yield path


def scan(root: Path, table: RenameTable, extensions: list[str], fix: bool = False):
    """Returns (findings left after any fixes, files rewritten, replacements made)."""
    findings = []
    files_fixed = 0
    replacements = 0

    for path in iter_source_files(root, extensions):
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            print(f"  ! Skipping non-UTF-8 file: {path}")
            continue

        if fix:
            new_text, count = rewrite_text(text, table)
            if count:
                path.write_text(new_text, encoding="utf-8")
                files_fixed += 1
                replacements += count
                print(f"  ✓ Fixed {count} names in {path}")
                text = new_text

        findings.extend(find_in_text(text, table, str(path)))

    return findings, files_fixed, replacements


def main(argv=None):
    parser = argparse.ArgumentParser(description="Find legacy TelemetryDeck names in source files")
    parser.add_argument("root", type=Path, help="Directory (or single file) to scan")
    parser.add_argument("--ext", action="append", dest="extensions",
                        help=f"File extension to scan, repeatable (default: {' '.join(DEFAULT_EXTENSIONS)})")
    parser.add_argument("--table", help="Path to the rename table")
    parser.add_argument("--fix", action="store_true", help="Rewrite renamed literals in place")
    args = parser.parse_args(argv)

    if not args.root.exists():
        print(f"ERROR: {args.root} does not exist")
        return 1

    try:
        table = load_table(args.table)
    except TableError as e:
        print(f"ERROR: {e}")
        return 1

    extensions = args.extensions or DEFAULT_EXTENSIONS
    print(f"Scanning {args.root} ({', '.join(extensions)})...")

    findings, files_fixed, replacements = scan(args.root, table, extensions, fix=args.fix)

    if args.fix:
        print(f"\nRewrote {replacements} names in {files_fixed} files")

    if not findings:
        print("\n✓ No legacy names found")
        return 0

    print(f"\n✗ {len(findings)} legacy names found:")
    for finding in findings[:50]:
        print(f"  {finding}")
    if len(findings) > 50:
        print(f"  ... and {len(findings) - 50} more")
    return 1


if __name__ == "__main__":
    sys.exit(main())
