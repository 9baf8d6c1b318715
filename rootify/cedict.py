"""Seed word roots from CC-CEDICT.

- downloads the CC-CEDICT zip from MDBG once and caches it,
- parses ``trad simp [pin1 yin1] /gloss 1/gloss 2/`` lines,
- keeps simplified headwords short enough for the segmenter,
- reduces each headword to one short English gloss.

The download and extract helpers are adapted from the chinese-reader
project's scripts/masterdict_from_masterorig.py.

CC-CEDICT is CC BY-SA 3.0; keep the attribution if you ship seeded data.
"""

from __future__ import annotations

import logging
import re
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

import requests

from .engine import MAX_ROOT_LENGTH

log = logging.getLogger(__name__)

CEDICT_ZIP_URL = "https://www.mdbg.net/chinese/export/cedict/cedict_1_0_ts_utf-8_mdbg.zip"
CEDICT_TXT_NAME = "cedict_ts.u8"

RE_CEDICT_LINE = re.compile(
    r"^(?P<trad>\S+)\s+(?P<simp>\S+)\s+\[(?P<pinyin>[^\]]+)\]\s+/(?P<defs>.+)/\s*$"
)
RE_PAREN_CHUNK = re.compile(r"\([^)]*\)")
RE_SQUARE_BRACKET = re.compile(r"\[[^\]]*\]")
RE_CJK = re.compile(r"[\u4e00-\u9fff]+")

# Glosses that describe the entry rather than translate it.
LOW_VALUE_PATTERNS = (
    "surname ",
    "abbr.",
    "variant of",
    "see also",
    "old variant",
    "archaic",
    "also pr.",
    "also written",
    "erhua variant",
    "kangxi radical",
)

MAX_GLOSS_CHARS = 40


@dataclass
class CedictEntry:
    trad: str
    simp: str
    pinyin: str
    defs: List[str]


def download_if_needed(cache_dir: Path, force: bool = False, timeout: int = 60) -> Path:
    cache_dir.mkdir(parents=True, exist_ok=True)
    zip_path = cache_dir / "cedict_1_0_ts_utf-8_mdbg.zip"

    if zip_path.exists() and not force:
        return zip_path

    log.info("downloading CC-CEDICT from %s", CEDICT_ZIP_URL)
    resp = requests.get(CEDICT_ZIP_URL, timeout=timeout)
    resp.raise_for_status()
    zip_path.write_bytes(resp.content)
    return zip_path


def extract_cedict_txt(zip_path: Path, cache_dir: Path) -> Path:
    out_txt = cache_dir / CEDICT_TXT_NAME
    if out_txt.exists():
        return out_txt

    with zipfile.ZipFile(zip_path, "r") as z:
        names = z.namelist()
        target = CEDICT_TXT_NAME if CEDICT_TXT_NAME in names else None
        if target is None:
            target = next((n for n in names if n.endswith((".u8", ".txt"))), None)
        if target is None:
            raise RuntimeError(f"Could not find CEDICT text inside zip. Files: {names[:20]}")

        with z.open(target) as f_in:
            out_txt.write_bytes(f_in.read())

    return out_txt


def parse_lines(lines: Iterable[str]) -> Iterator[CedictEntry]:
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        m = RE_CEDICT_LINE.match(line)
        if not m:
            continue
        defs = [d.strip() for d in m.group("defs").split("/") if d.strip()]
        yield CedictEntry(
            trad=m.group("trad"),
            simp=m.group("simp"),
            pinyin=m.group("pinyin").strip(),
            defs=defs,
        )


def clean_gloss(raw: str) -> str:
    """Strip classifier notes, pinyin refs, parentheticals and CJK from one sense."""
    s = raw.split("CL:", 1)[0]
    s = RE_SQUARE_BRACKET.sub("", s)
    s = RE_PAREN_CHUNK.sub("", s)
    s = RE_CJK.sub("", s)
    s = s.replace("|", " ").replace('"', "")
    s = re.sub(r"\s+", " ", s).strip(" ,;")
    return s


def pick_gloss(defs: List[str]) -> Optional[str]:
    """First usable short gloss, or None if every sense is meta or empty."""
    for d in defs:
        for part in d.split(";"):
            g = clean_gloss(part)
            if len(g) < 2:
                continue
            low = g.lower()
            if any(p in low for p in LOW_VALUE_PATTERNS):
                continue
            if len(g) > MAX_GLOSS_CHARS:
                continue
            return g
    return None


def build_roots(
    entries: Iterable[CedictEntry],
    max_length: int = MAX_ROOT_LENGTH,
    skip: Optional[Iterable[str]] = None,
) -> Dict[str, str]:
    """Map simplified headword -> gloss. The first entry with a usable gloss wins."""
    skip_set = set(skip or ())
    roots: Dict[str, str] = {}
    for e in entries:
        if e.simp in roots or e.simp in skip_set:
            continue
        if len(e.simp) > max_length:
            continue
        gloss = pick_gloss(e.defs)
        if gloss:
            roots[e.simp] = gloss
    return roots


def load_roots(cache_dir: Path, force_download: bool = False, skip: Optional[Iterable[str]] = None) -> Dict[str, str]:
    zip_path = download_if_needed(cache_dir, force=force_download)
    txt = extract_cedict_txt(zip_path, cache_dir)
    with txt.open("r", encoding="utf-8", errors="replace") as f:
        return build_roots(parse_lines(f), skip=skip)
