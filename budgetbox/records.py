"""Server-side budget record storage.

One record per email holding the latest budget document and the time
it was saved.  Saving replaces any previous record for the email.  The
sqlite store is used when a database is configured; otherwise records
live in process memory and are lost on restart.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Protocol

from .config import get_sqlite_path

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS budgets (
    email TEXT PRIMARY KEY,
    payload TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

UPSERT_SQL = """
INSERT INTO budgets (email, payload, updated_at)
VALUES (?, ?, ?)
ON CONFLICT (email)
DO UPDATE SET payload = excluded.payload, updated_at = excluded.updated_at
"""


@dataclass(frozen=True)
class BudgetRecord:
    email: str
    budget: Dict[str, Any]
    updated_at: str


class RecordStore(Protocol):
    def save(self, record: BudgetRecord) -> None:
        ...

    def latest(self, email: str) -> Optional[BudgetRecord]:
        ...


class MemoryRecordStore:
    """Dictionary-backed store keyed by email."""

    def __init__(self) -> None:
        self._records: Dict[str, BudgetRecord] = {}
        self._lock = threading.Lock()

    def save(self, record: BudgetRecord) -> None:
        with self._lock:
            self._records[record.email] = record

    def latest(self, email: str) -> Optional[BudgetRecord]:
        with self._lock:
            return self._records.get(email)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class SqliteRecordStore:
    """sqlite-backed store; each save is a single upsert statement."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.init_db()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.path))
        try:
            yield conn
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def save(self, record: BudgetRecord) -> None:
        with self.connect() as conn:
            conn.execute(
                UPSERT_SQL,
                (record.email, json.dumps(record.budget, sort_keys=True), record.updated_at),
            )
            conn.commit()

    def latest(self, email: str) -> Optional[BudgetRecord]:
        with self.connect() as conn:
            row = conn.execute(
                "SELECT email, payload, updated_at FROM budgets WHERE email = ?",
                (email,),
            ).fetchone()
        if row is None:
            return None
        return BudgetRecord(email=row[0], budget=json.loads(row[1]), updated_at=row[2])


def build_record_store(database_url: Optional[str] = None) -> RecordStore:
    """Pick the sqlite store when a database is configured, memory otherwise."""
    path = get_sqlite_path(database_url)
    if path is None:
        logger.info("No DATABASE_URL configured; budget records are kept in memory")
        return MemoryRecordStore()
    logger.info("Storing budget records in %s", path)
    return SqliteRecordStore(path)
