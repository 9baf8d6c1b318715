#!/usr/bin/env python3
"""
Seed the word-root dictionary from CC-CEDICT.

Behavior:
- Downloads the CC-CEDICT zip once into --cache-dir (reused on reruns).
- Keeps simplified headwords of at most 10 characters (longer never match).
- Reduces each headword to one short English gloss.
- By default only adds headwords that are not in the dictionary yet;
  --overwrite replaces existing glosses too.
- Imports everything in one transaction (all or nothing).

Usage:
  python3 scripts/seed_from_cedict.py --db ~/.config/rootify/rootify.db
  python3 scripts/seed_from_cedict.py --dry-run

CC-CEDICT is CC BY-SA 3.0; include attribution if you redistribute the seeded data.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from rootify.cedict import load_roots
from rootify.config import load_settings
from rootify.errors import StoreError
from rootify.store import WordRootStore


def main() -> None:
    settings = load_settings()
    ap = argparse.ArgumentParser()
    ap.add_argument("--db", type=Path, default=settings.db_path, help="Path to rootify.db")
    ap.add_argument("--cache-dir", type=Path, default=Path(".cache/cedict"), help="Cache directory for CC-CEDICT download")
    ap.add_argument("--force-download", action="store_true", help="Redownload CC-CEDICT even if cached")
    ap.add_argument("--overwrite", action="store_true", help="Replace glosses of roots that already exist")
    ap.add_argument("--dry-run", action="store_true", help="Only report what would be imported")
    args = ap.parse_args()

    store = WordRootStore.open(args.db)
    existing = store.get_all()
    skip = () if args.overwrite else existing.keys()

    roots = load_roots(args.cache_dir, force_download=args.force_download, skip=skip)
    updated = sum(1 for k in roots if k in existing)
    print(f"Existing roots: {len(existing)}")
    print(f"CC-CEDICT roots to import: {len(roots)} (new={len(roots) - updated}, updated={updated})")

    if args.dry_run:
        print("Dry run: nothing written.")
        return

    try:
        store.import_roots(roots)
    except StoreError as e:
        raise SystemExit(f"Import failed, dictionary unchanged: {e}")

    print(f"Wrote: {args.db}  (roots={store.count()})")


if __name__ == "__main__":
    main()
