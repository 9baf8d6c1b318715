from __future__ import annotations

from typing import Dict, List, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field


class WordRoot(BaseModel):
    chinese: str
    english: str
    created_at: str
    updated_at: str


class Segment(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    chinese: str
    english: str = ""
    is_unknown: bool = Field(default=False, alias="isUnknown")


class Span(BaseModel):
    text: str
    start: int  # inclusive code point offset
    end: int    # exclusive code point offset


class LookupResult(BaseModel):
    selected: Span
    segment: Segment


class RootIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    chinese: str = Field(min_length=1)
    english: str = Field(min_length=1)


class TextIn(BaseModel):
    text: str
    save_history: bool = False


class TranslationOut(BaseModel):
    text: str
    translation: str
    complete: bool


class ImportPreviewItem(BaseModel):
    chinese: str
    english: str
    action: Literal["add", "update"]


class CsvImportIn(BaseModel):
    content: str
    dry_run: bool = False


class CsvImportOut(BaseModel):
    imported: bool
    added: int
    updated: int
    preview: List[ImportPreviewItem]


class HistoryRecord(BaseModel):
    id: int
    chinese_text: str
    english_text: str
    created_at: str


# Snapshot of the word_roots table (MVP): { "火山": "volcano", ... }, read-only.
Snapshot = Mapping[str, str]

# Bulk import payload: { "你": "you", "好": "good" }
RootsJson = Dict[str, str]
