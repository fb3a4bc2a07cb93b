#!/usr/bin/env python3
"""
Render data/signal-renames.yaml into the Markdown rename article.

The article keeps whatever front matter it already has; only the body is
regenerated. --check compares without writing (for CI).

Usage:
    python3 scripts/render_rename_table.py                          # print to stdout
    python3 scripts/render_rename_table.py -o articles/signal-renames.md
    python3 scripts/render_rename_table.py -o articles/signal-renames.md --check
"""

import argparse
import sys
from pathlib import Path

import yaml

from signal_renames import RenameTable, TableError, load_table

DEFAULT_FRONT_MATTER = {
    "title": "Signal & Parameter Renames",
    "description": "Legacy signal types and parameter keys and their TelemetryDeck.* replacements.",
    "tags": ["signals", "parameters", "migration"],
}

INTRO = (
    "All default signals and parameters now live in the `TelemetryDeck.` namespace. "
    "Use the tables below to update insights and filters that still reference the old names."
)


def split_front_matter(text: str) -> tuple[dict, str]:
    """Returns (front_matter, body). ({}, text) when there is none."""
    if not text.startswith("---\n"):
        return {}, text
    end = text.find("\n---\n", 3)
    if end == -1:
        return {}, text
    try:
        front = yaml.safe_load(text[4:end]) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"invalid front matter: {e}") from e
    if not isinstance(front, dict):
        return {}, text
    return front, text[end + len("\n---\n"):]


def render_row(entry) -> str:
    if entry.is_deleted:
        new = f"*deleted* ({entry.new_name.reason})"
    else:
        new = f"`{entry.new_name}`"
    return f"| `{entry.old_name}` | {new} |"


def render_section(title: str, entries) -> list[str]:
    lines = [f"## {title}", ""]
    if not entries:
        return lines + ["No changes.", ""]
    lines.append("| Old name | New name |")
    lines.append("| --- | --- |")
    lines.extend(render_row(e) for e in entries)
    lines.append("")
    return lines


def render_article(table: RenameTable, front_matter: dict = None) -> str:
    if front_matter is None:
        front_matter = DEFAULT_FRONT_MATTER
    header = yaml.dump(front_matter, default_flow_style=False, allow_unicode=True, sort_keys=False)

    lines = ["---", header.rstrip("\n"), "---", "", INTRO, ""]
    lines += render_section("Signals", table.signals())
    lines += render_section("Parameters", table.parameters())
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Render the rename table as a Markdown article")
    parser.add_argument("-o", "--output", type=Path, help="Article path (default: stdout)")
    parser.add_argument("--table", help="Path to the rename table")
    parser.add_argument("--check", action="store_true", help="Exit 1 if the article is out of date")
    args = parser.parse_args(argv)

    try:
        table = load_table(args.table)
    except TableError as e:
        print(f"ERROR: {e}")
        return 1

    existing = None
    front_matter = None
    if args.output and args.output.exists():
        existing = args.output.read_text(encoding="utf-8")
        try:
            front_matter, _ = split_front_matter(existing)
        except ValueError as e:
            print(f"ERROR: {args.output}: {e}")
            return 1
        front_matter = front_matter or None

    article = render_article(table, front_matter)

    if args.check:
        if not args.output:
            print("ERROR: --check needs --output")
            return 1
        if existing == article:
            print(f"✓ {args.output} is up to date")
            return 0
        print(f"✗ {args.output} is out of date, re-run without --check")
        return 1

    if not args.output:
        sys.stdout.write(article)
        return 0

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(article, encoding="utf-8")
    print(f"Output written to: {args.output} ({len(table)} entries)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
