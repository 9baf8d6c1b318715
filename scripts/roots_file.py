#!/usr/bin/env python3
"""
Import or export the word-root dictionary as CSV.

File shape (same as the API export):
  中文词根,英文对应
  "火山","volcano"
  "你","you"

Usage:
  python3 scripts/roots_file.py export roots.csv
  python3 scripts/roots_file.py import roots.csv [--dry-run]

Import prints an add/update preview and then applies every row in one
transaction; on failure the dictionary is left exactly as it was.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from rootify.config import load_settings
from rootify.csvio import is_empty_export
from rootify.errors import StoreError
from rootify.service import RootService
from rootify.store import WordRootStore


def cmd_export(store: WordRootStore, path: Path) -> None:
    content = store.export()
    if is_empty_export(content):
        print("No roots to export.")
        return
    path.write_text(content, encoding="utf-8")
    print(f"Wrote: {path}  (roots={store.count()})")


def cmd_import(store: WordRootStore, path: Path, dry_run: bool) -> None:
    if not path.exists():
        raise SystemExit(f"File not found: {path}")

    content = path.read_text(encoding="utf-8-sig")
    service = RootService(store)
    try:
        result = service.import_csv(content, dry_run=dry_run)
    except StoreError as e:
        raise SystemExit(f"Import failed, dictionary unchanged: {e}")

    for item in result.preview:
        print(f"  [{item.action}] {item.chinese} -> {item.english}")
    print(f"New: {result.added}  Updated: {result.updated}")
    print("Imported." if result.imported else "Nothing written.")


def main() -> None:
    settings = load_settings()
    ap = argparse.ArgumentParser()
    ap.add_argument("--db", type=Path, default=settings.db_path, help="Path to rootify.db")
    sub = ap.add_subparsers(dest="command", required=True)

    p_exp = sub.add_parser("export", help="Write all roots to a CSV file")
    p_exp.add_argument("path", type=Path)

    p_imp = sub.add_parser("import", help="Import roots from a CSV file")
    p_imp.add_argument("path", type=Path)
    p_imp.add_argument("--dry-run", action="store_true", help="Only show the preview")

    args = ap.parse_args()
    store = WordRootStore.open(args.db)

    if args.command == "export":
        cmd_export(store, args.path)
    else:
        cmd_import(store, args.path, args.dry_run)


if __name__ == "__main__":
    main()
