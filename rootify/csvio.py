"""CSV text format used by export and file import.

Export shape (UTF-8):

    中文词根,英文对应
    "火山","volcano"
    "你","you"

Every field is quoted. An embedded ``"`` is doubled, so values without quotes
come out exactly as ``"<chinese>","<english>"``.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, List, Mapping, Tuple

from .models import ImportPreviewItem

CSV_HEADER = "中文词根,英文对应"


def format_csv(rows: Iterable[Tuple[str, str]]) -> str:
    buf = io.StringIO()
    buf.write(CSV_HEADER + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for chinese, english in rows:
        writer.writerow([chinese, english])
    return buf.getvalue()


def is_empty_export(content: str) -> bool:
    return not content.strip() or content.strip() == CSV_HEADER


def parse_csv(content: str, existing: Mapping[str, str]) -> List[ImportPreviewItem]:
    """Parse exported CSV text into preview items tagged add/update.

    - The first non-blank row is the header and is skipped.
    - Quoted fields keep commas, line breaks and doubled quotes.
    - Blank lines and rows with an empty key or value are skipped.
    - If a key repeats, the last row wins (one item per key, first position kept).
    """
    by_key: dict[str, ImportPreviewItem] = {}
    seen_header = False
    for cols in csv.reader(io.StringIO(content), skipinitialspace=True):
        if not any(c.strip() for c in cols):
            continue
        if not seen_header:
            seen_header = True
            continue
        if len(cols) < 2:
            continue
        chinese = cols[0].strip()
        english = cols[1].strip()
        if not chinese or not english:
            continue
        action = "update" if chinese in existing else "add"
        by_key[chinese] = ImportPreviewItem(chinese=chinese, english=english, action=action)

    return list(by_key.values())


def preview_counts(preview: Iterable[ImportPreviewItem]) -> Tuple[int, int]:
    """Return (added, updated)."""
    added = updated = 0
    for item in preview:
        if item.action == "add":
            added += 1
        else:
            updated += 1
    return added, updated
