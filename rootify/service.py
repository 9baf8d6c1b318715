from __future__ import annotations

import logging
from typing import List, Optional

from .csvio import parse_csv, preview_counts
from .engine import TranslationEngine
from .models import CsvImportOut, ImportPreviewItem, LookupResult, Segment, TranslationOut
from .store import HistoryStore, WordRootStore

log = logging.getLogger(__name__)


class RootService:
    """Text operations over a fresh snapshot of the store, one snapshot per call.

    Store errors propagate unchanged; the engine adds none of its own.
    """

    def __init__(self, store: WordRootStore, history: Optional[HistoryStore] = None):
        self.store = store
        self.history = history

    def engine(self) -> TranslationEngine:
        return TranslationEngine(self.store.get_all())

    def segment_text(self, text: str) -> List[Segment]:
        return self.engine().segment(text)

    def translate_text(self, text: str) -> str:
        return self.engine().translate(text)

    def is_translation_complete(self, text: str) -> bool:
        return self.engine().is_complete(text)

    def lookup_in_text(self, text: str, offset: int) -> LookupResult:
        span, seg = self.engine().segment_at(text, offset)
        return LookupResult(selected=span, segment=seg)

    def translate_and_record(self, text: str, save_history: bool = False) -> TranslationOut:
        # Translation and completeness come from the same snapshot.
        engine = self.engine()
        out = TranslationOut(
            text=text,
            translation=engine.translate(text),
            complete=engine.is_complete(text),
        )
        if save_history and self.history is not None and text.strip():
            self.history.save(text, out.translation)
        return out

    def preview_import(self, content: str) -> List[ImportPreviewItem]:
        return parse_csv(content, self.store.get_all())

    def import_csv(self, content: str, dry_run: bool = False) -> CsvImportOut:
        preview = self.preview_import(content)
        added, updated = preview_counts(preview)
        imported = False
        if preview and not dry_run:
            self.store.import_roots({item.chinese: item.english for item in preview})
            imported = True
        log.info("csv import: %d new, %d updated, dry_run=%s", added, updated, dry_run)
        return CsvImportOut(imported=imported, added=added, updated=updated, preview=preview)
