"""SQLite-backed word-root dictionary and translation history.

One store object is created at startup and handed to everything that needs it.
Each operation opens a short-lived connection, so no sqlite connection is ever
shared between threads. In-process consistency comes from a reader/writer lock:

- get_all / export / count / get  -> shared (many readers at once)
- add / delete / clear_all / import_roots -> exclusive

The lock does not protect against another process writing the same file.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import closing, contextmanager
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional, Union

from .csvio import format_csv
from .engine import MAX_ROOT_LENGTH
from .errors import QueryError, StoreUnavailable, TransactionAborted, WriteError
from .models import HistoryRecord, Snapshot, WordRoot

log = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS word_roots (
    chinese TEXT PRIMARY KEY,
    english TEXT NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_chinese ON word_roots(chinese);

CREATE TABLE IF NOT EXISTS translation_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    chinese_text TEXT NOT NULL,
    english_text TEXT NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_history_created_at ON translation_history(created_at DESC);
"""

UPSERT_SQL = (
    "INSERT INTO word_roots (chinese, english, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
    "ON CONFLICT(chinese) DO UPDATE SET english = excluded.english, updated_at = CURRENT_TIMESTAMP"
)


class ReadWriteLock:
    """Many readers or one writer. Writers waiting block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class Database:
    """Holds the db path and opens connections once the schema exists."""

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    def init_db(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with closing(sqlite3.connect(str(self.db_path), timeout=30.0)) as conn:
                conn.executescript(SCHEMA_SQL)
                conn.commit()
        except sqlite3.Error as e:
            log.exception("failed to create tables in %s", self.db_path)
            raise WriteError(f"failed to create table: {e}") from e
        self._ready = True
        log.info("database ready: %s", self.db_path)

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        if not self._ready:
            raise StoreUnavailable()
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=30.0)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"failed to open database {self.db_path}: {e}") from e
        with closing(conn):
            conn.row_factory = sqlite3.Row
            yield conn


class WordRootStore:
    def __init__(self, db: Database):
        self._db = db
        self._lock = ReadWriteLock()

    @classmethod
    def open(cls, db_path: Union[str, Path]) -> "WordRootStore":
        """Create the database file/schema if needed and return a ready store."""
        db = Database(db_path)
        db.init_db()
        return cls(db)

    @property
    def db(self) -> Database:
        return self._db

    def _rows(self) -> list[tuple[str, str]]:
        try:
            with self._db.connect() as conn:
                cur = conn.execute("SELECT chinese, english FROM word_roots ORDER BY chinese")
                return [(r["chinese"], r["english"]) for r in cur.fetchall()]
        except sqlite3.Error as e:
            log.error("failed to query roots: %s", e)
            raise QueryError(f"failed to query roots: {e}") from e

    def get_all(self) -> Snapshot:
        """Every root, ordered by key, as a read-only copy."""
        with self._lock.read():
            rows = self._rows()
        return MappingProxyType(dict(rows))

    def get(self, chinese: str) -> Optional[WordRoot]:
        with self._lock.read():
            try:
                with self._db.connect() as conn:
                    row = conn.execute(
                        "SELECT chinese, english, created_at, updated_at FROM word_roots WHERE chinese = ?",
                        (chinese,),
                    ).fetchone()
            except sqlite3.Error as e:
                log.error("failed to query root %s: %s", chinese, e)
                raise QueryError(f"failed to query root: {e}") from e
        if row is None:
            return None
        return WordRoot(
            chinese=row["chinese"],
            english=row["english"],
            created_at=str(row["created_at"]),
            updated_at=str(row["updated_at"]),
        )

    def count(self) -> int:
        with self._lock.read():
            try:
                with self._db.connect() as conn:
                    return int(conn.execute("SELECT COUNT(*) FROM word_roots").fetchone()[0])
            except sqlite3.Error as e:
                log.error("failed to count roots: %s", e)
                raise QueryError(f"failed to count roots: {e}") from e

    def add(self, chinese: str, english: str) -> None:
        """Insert or replace the gloss for ``chinese``."""
        if len(chinese) > MAX_ROOT_LENGTH:
            log.warning("root %r is longer than %d characters and will never match", chinese, MAX_ROOT_LENGTH)
        with self._lock.write():
            try:
                with self._db.connect() as conn:
                    conn.execute(UPSERT_SQL, (chinese, english))
                    conn.commit()
            except sqlite3.Error as e:
                log.error("failed to add root %s: %s", chinese, e)
                raise WriteError(f"failed to add root: {e}") from e

    def delete(self, chinese: str) -> None:
        with self._lock.write():
            try:
                with self._db.connect() as conn:
                    conn.execute("DELETE FROM word_roots WHERE chinese = ?", (chinese,))
                    conn.commit()
            except sqlite3.Error as e:
                log.error("failed to delete root %s: %s", chinese, e)
                raise WriteError(f"failed to delete root: {e}") from e

    def clear_all(self) -> None:
        with self._lock.write():
            try:
                with self._db.connect() as conn:
                    conn.execute("DELETE FROM word_roots")
                    conn.commit()
            except sqlite3.Error as e:
                log.error("failed to clear roots: %s", e)
                raise WriteError(f"failed to clear roots: {e}") from e
        log.info("cleared all roots")

    def import_roots(self, roots: Mapping[str, str]) -> int:
        """Upsert every pair in one transaction. Returns the number of pairs written.

        Any failing pair rolls back the whole batch and raises TransactionAborted.
        """
        with self._lock.write():
            with self._db.connect() as conn:
                for chinese, english in roots.items():
                    try:
                        conn.execute(UPSERT_SQL, (chinese, english))
                    except sqlite3.Error as e:
                        conn.rollback()
                        log.error("import rolled back at root %s: %s", chinese, e)
                        raise TransactionAborted(str(chinese), str(e)) from e
                try:
                    conn.commit()
                except sqlite3.Error as e:
                    conn.rollback()
                    log.error("failed to commit import: %s", e)
                    raise WriteError(f"failed to import roots: {e}") from e
        log.info("imported %d roots", len(roots))
        return len(roots)

    def export(self) -> str:
        with self._lock.read():
            rows = self._rows()
        return format_csv(rows)


class HistoryStore:
    """Recent translations; shares the database file with the word roots."""

    def __init__(self, db: Database, limit: int = 100):
        self._db = db
        self.limit = limit

    def save(self, chinese_text: str, english_text: str) -> None:
        try:
            with self._db.connect() as conn:
                conn.execute(
                    "INSERT INTO translation_history (chinese_text, english_text) VALUES (?, ?)",
                    (chinese_text, english_text),
                )
                conn.commit()
        except sqlite3.Error as e:
            log.error("failed to save history: %s", e)
            raise WriteError(f"failed to save history: {e}") from e

    def recent(self, limit: Optional[int] = None) -> List[HistoryRecord]:
        limit = self.limit if limit is None else limit
        try:
            with self._db.connect() as conn:
                rows = conn.execute(
                    "SELECT id, chinese_text, english_text, created_at FROM translation_history "
                    "ORDER BY created_at DESC, id DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        except sqlite3.Error as e:
            log.error("failed to query history: %s", e)
            raise QueryError(f"failed to query history: {e}") from e
        return [
            HistoryRecord(
                id=r["id"],
                chinese_text=r["chinese_text"],
                english_text=r["english_text"],
                created_at=str(r["created_at"]),
            )
            for r in rows
        ]

    def clear(self) -> None:
        try:
            with self._db.connect() as conn:
                conn.execute("DELETE FROM translation_history")
                conn.commit()
        except sqlite3.Error as e:
            log.error("failed to clear history: %s", e)
            raise WriteError(f"failed to clear history: {e}") from e
