"""SQLite storage for enriched feedback records."""

from __future__ import annotations

import logging
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from dateutil import parser as dt_parser

from .errors import PersistenceError
from .schemas import ALL_PRODUCTS, FeedbackRecord


logger = logging.getLogger(__name__)


def _to_iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _row_to_record(row: sqlite3.Row) -> FeedbackRecord:
    return FeedbackRecord(
        id=row["id"],
        message=row["message"],
        source=row["source"],
        product=row["product"],
        summary=row["summary"],
        created_at=dt_parser.isoparse(row["created_at"]),
    )


class SQLiteFeedbackStore:
    """Write-once feedback table with newest-first reads."""

    def __init__(self, db_path: str):
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._init_schema()
        self._last_created_at = self._load_last_created_at()

    def _init_schema(self) -> None:
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS feedback (
                id TEXT PRIMARY KEY,
                message TEXT NOT NULL,
                source TEXT NOT NULL,
                product TEXT NOT NULL,
                summary TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
            """
        )
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_feedback_product ON feedback(product)")
        self.conn.execute("CREATE INDEX IF NOT EXISTS idx_feedback_created_at ON feedback(created_at)")
        self.conn.commit()

    def _load_last_created_at(self) -> Optional[datetime]:
        row = self.conn.execute("SELECT MAX(created_at) AS ts FROM feedback").fetchone()
        if row is None or row["ts"] is None:
            return None
        return dt_parser.isoparse(row["ts"])

    def _next_timestamp(self) -> datetime:
        # Wall clock may step backwards; created_at must not.
        now = datetime.now(timezone.utc)
        if self._last_created_at is not None and now < self._last_created_at:
            now = self._last_created_at
        return now

    def insert_feedback(self, message: str, source: str, product: str, summary: str) -> FeedbackRecord:
        """Insert one complete record with a fresh id and timestamp."""
        if not summary:
            raise PersistenceError("refusing to persist feedback without a summary")
        with self._lock:
            record = FeedbackRecord(
                id=str(uuid.uuid4()),
                message=message,
                source=source,
                product=product,
                summary=summary,
                created_at=self._next_timestamp(),
            )
            try:
                with self.conn:
                    self.conn.execute(
                        """
                        INSERT INTO feedback (id, message, source, product, summary, created_at)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (
                            record.id,
                            record.message,
                            record.source,
                            record.product,
                            record.summary,
                            _to_iso(record.created_at),
                        ),
                    )
            except sqlite3.IntegrityError as exc:
                raise PersistenceError(f"feedback id collision for {record.id}") from exc
            except sqlite3.Error as exc:
                raise PersistenceError(f"feedback insert failed: {exc}") from exc
            self._last_created_at = record.created_at
        logger.debug("Stored feedback %s for product %s", record.id, record.product)
        return record

    def list_feedback(self, product: Optional[str] = None) -> List[FeedbackRecord]:
        """Newest first; exact, case-sensitive product match unless "all"/None."""
        where_sql = ""
        params: List[str] = []
        if product is not None and product != ALL_PRODUCTS:
            where_sql = "WHERE product = ?"
            params.append(product)
        query = f"""
            SELECT * FROM feedback
            {where_sql}
            ORDER BY created_at DESC, rowid DESC
        """
        try:
            with self._lock:
                rows = self.conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"feedback query failed: {exc}") from exc
        return [_row_to_record(row) for row in rows]

    def get_feedback(self, record_id: str) -> Optional[FeedbackRecord]:
        with self._lock:
            row = self.conn.execute("SELECT * FROM feedback WHERE id = ?", (record_id,)).fetchone()
        return _row_to_record(row) if row else None

    def count(self) -> int:
        with self._lock:
            row = self.conn.execute("SELECT COUNT(*) AS n FROM feedback").fetchone()
        return int(row["n"]) if row else 0

    def close(self) -> None:
        self.conn.close()
