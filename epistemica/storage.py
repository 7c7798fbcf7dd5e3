"""
Storage — analysis records and the doctrine policy store.

The core only depends on the two protocols below. The in-memory
stores back tests and local runs; SQLiteAnalysisStore keeps history
across restarts with a single local file.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
import uuid
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable

from epistemica.config import settings
from epistemica.doctrine import DEFAULT_DOCTRINES
from epistemica.errors import PersistenceFailure


@dataclass
class AnalysisRecord:
    """One completed analysis, as persisted by the caller."""
    module_type: str
    input_text: str
    word_count: int
    result: dict
    processing_time_ms: int
    user_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def _stamp(record: AnalysisRecord) -> AnalysisRecord:
    return replace(
        record,
        id=record.id or str(uuid.uuid4()),
        created_at=record.created_at or datetime.now(timezone.utc).isoformat(),
    )


# ============================================================
# PROTOCOLS
# ============================================================

@runtime_checkable
class AnalysisStore(Protocol):
    async def save(self, record: AnalysisRecord) -> AnalysisRecord: ...

    async def get_by_id(self, record_id: str) -> Optional[AnalysisRecord]: ...

    async def list_recent(
        self, user_id: Optional[str] = None, limit: int = 50,
    ) -> list[AnalysisRecord]: ...

    async def delete(self, record_id: str) -> None: ...


@runtime_checkable
class PolicyStore(Protocol):
    async def get_all(self) -> dict[str, str]: ...

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, description: Optional[str] = None) -> None: ...

    async def initialize_defaults(self) -> None: ...


# ============================================================
# IN-MEMORY
# ============================================================

class InMemoryAnalysisStore:
    """Dict-backed record store."""

    def __init__(self):
        self._records: dict[str, AnalysisRecord] = {}
        self._lock = asyncio.Lock()

    async def save(self, record: AnalysisRecord) -> AnalysisRecord:
        stored = _stamp(record)
        async with self._lock:
            self._records[stored.id] = stored
        return stored

    async def get_by_id(self, record_id: str) -> Optional[AnalysisRecord]:
        async with self._lock:
            return self._records.get(record_id)

    async def list_recent(
        self, user_id: Optional[str] = None, limit: int = 50,
    ) -> list[AnalysisRecord]:
        async with self._lock:
            records = [
                r for r in self._records.values()
                if user_id is None or r.user_id == user_id
            ]
        records.sort(key=lambda r: r.created_at or "", reverse=True)
        return records[:limit]

    async def delete(self, record_id: str) -> None:
        async with self._lock:
            self._records.pop(record_id, None)


class InMemoryPolicyStore:
    """Dict-backed doctrine store. Descriptions are kept alongside values."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})
        self._descriptions: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get_all(self) -> dict[str, str]:
        async with self._lock:
            return dict(self._values)

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._values.get(key)

    async def set(self, key: str, value: str, description: Optional[str] = None) -> None:
        async with self._lock:
            self._values[key] = value
            if description is not None:
                self._descriptions[key] = description

    async def describe(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._descriptions.get(key)

    async def initialize_defaults(self) -> None:
        """Seed missing keys from DEFAULT_DOCTRINES; existing values win."""
        async with self._lock:
            for key, (value, description) in DEFAULT_DOCTRINES.items():
                if key not in self._values:
                    self._values[key] = value
                    self._descriptions[key] = description


# ============================================================
# SQLITE
# ============================================================

class SQLiteAnalysisStore:
    """Analysis history backed by SQLite. Results are stored as JSON text."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or settings.DB_PATH
        self._lock = threading.Lock()
        self._init_db()

    def _init_db(self):
        with self._get_conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS analysis_history (
                    id TEXT PRIMARY KEY,
                    user_id TEXT,
                    module_type TEXT NOT NULL,
                    input_text TEXT NOT NULL,
                    word_count INTEGER NOT NULL,
                    result TEXT NOT NULL,
                    processing_time_ms INTEGER NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_history_created
                ON analysis_history(created_at)
            """)
            conn.commit()

    def _get_conn(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    @staticmethod
    def _row_to_record(row: tuple) -> AnalysisRecord:
        return AnalysisRecord(
            id=row[0], user_id=row[1], module_type=row[2], input_text=row[3],
            word_count=row[4], result=json.loads(row[5]),
            processing_time_ms=row[6], created_at=row[7],
        )

    def _save_sync(self, record: AnalysisRecord) -> AnalysisRecord:
        stored = _stamp(record)
        try:
            with self._lock, self._get_conn() as conn:
                conn.execute(
                    """INSERT INTO analysis_history
                       (id, user_id, module_type, input_text, word_count,
                        result, processing_time_ms, created_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                    (stored.id, stored.user_id, stored.module_type, stored.input_text,
                     stored.word_count, json.dumps(stored.result, default=str),
                     stored.processing_time_ms, stored.created_at),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceFailure(f"Could not save analysis {stored.id}: {e}") from e
        return stored

    def _get_sync(self, record_id: str) -> Optional[AnalysisRecord]:
        with self._get_conn() as conn:
            row = conn.execute(
                """SELECT id, user_id, module_type, input_text, word_count,
                          result, processing_time_ms, created_at
                   FROM analysis_history WHERE id = ?""",
                (record_id,),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def _list_sync(self, user_id: Optional[str], limit: int) -> list[AnalysisRecord]:
        query = """SELECT id, user_id, module_type, input_text, word_count,
                          result, processing_time_ms, created_at
                   FROM analysis_history"""
        params: tuple = ()
        if user_id is not None:
            query += " WHERE user_id = ?"
            params = (user_id,)
        query += " ORDER BY created_at DESC LIMIT ?"
        with self._get_conn() as conn:
            rows = conn.execute(query, params + (limit,)).fetchall()
        return [self._row_to_record(r) for r in rows]

    def _delete_sync(self, record_id: str) -> None:
        with self._lock, self._get_conn() as conn:
            conn.execute("DELETE FROM analysis_history WHERE id = ?", (record_id,))
            conn.commit()

    async def save(self, record: AnalysisRecord) -> AnalysisRecord:
        return await asyncio.to_thread(self._save_sync, record)

    async def get_by_id(self, record_id: str) -> Optional[AnalysisRecord]:
        return await asyncio.to_thread(self._get_sync, record_id)

    async def list_recent(
        self, user_id: Optional[str] = None, limit: int = 50,
    ) -> list[AnalysisRecord]:
        return await asyncio.to_thread(self._list_sync, user_id, limit)

    async def delete(self, record_id: str) -> None:
        await asyncio.to_thread(self._delete_sync, record_id)
