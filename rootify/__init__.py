from __future__ import annotations

from .engine import MAX_ROOT_LENGTH, TranslationEngine
from .errors import QueryError, RootifyError, StoreError, StoreUnavailable, TransactionAborted, WriteError
from .models import Segment
from .service import RootService
from .store import HistoryStore, WordRootStore

__version__ = "0.1.0"

__all__ = [
    "MAX_ROOT_LENGTH",
    "HistoryStore",
    "QueryError",
    "RootService",
    "RootifyError",
    "Segment",
    "StoreError",
    "StoreUnavailable",
    "TransactionAborted",
    "TranslationEngine",
    "WordRootStore",
    "WriteError",
    "__version__",
]
