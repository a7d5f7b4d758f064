from __future__ import annotations
import logging
import sqlite3
from contextlib import closing
from dataclasses import replace
from pathlib import Path
from typing import List, Union

from app.calculation import daily_stats
from app.errors import DatabaseError
from app.state import AggregateStats, DailyStats, SessionRecord

log = logging.getLogger(__name__)

DB_PATH = Path("data/typing_stats.db")

_COLUMNS = (
    "session_start",
    "session_end",
    "duration_seconds",
    "total_characters",
    "correct_characters",
    "incorrect_characters",
    "accuracy_percentage",
    "wpm",
    "sentences_completed",
    "word_count",
)


def _ensure_schema(conn):
    conn.execute("""
    CREATE TABLE IF NOT EXISTS typing_sessions(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        session_start DATETIME NOT NULL,
        session_end DATETIME NOT NULL,
        duration_seconds REAL NOT NULL,
        total_characters INTEGER NOT NULL,
        correct_characters INTEGER NOT NULL,
        incorrect_characters INTEGER NOT NULL,
        accuracy_percentage REAL NOT NULL,
        wpm REAL NOT NULL,
        sentences_completed INTEGER NOT NULL,
        word_count INTEGER DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    );
    """)
    # databases created before word_count existed
    cols = {row[1] for row in conn.execute("PRAGMA table_info(typing_sessions)")}
    if "word_count" not in cols:
        conn.execute("ALTER TABLE typing_sessions ADD COLUMN word_count INTEGER DEFAULT 0")


def _row_to_record(row: sqlite3.Row) -> SessionRecord:
    return SessionRecord(
        id=row["id"],
        session_start=row["session_start"],
        session_end=row["session_end"],
        duration_seconds=row["duration_seconds"],
        total_characters=row["total_characters"],
        correct_characters=row["correct_characters"],
        incorrect_characters=row["incorrect_characters"],
        accuracy_percentage=row["accuracy_percentage"],
        wpm=row["wpm"],
        sentences_completed=row["sentences_completed"],
        word_count=row["word_count"] or 0,
        created_at=row["created_at"],
    )


class SqliteSessionStore:
    """
    Completed-run history. Opens a connection per call so saves can run on a
    worker thread while the UI thread reads.
    """

    def __init__(self, path: Union[str, Path] = DB_PATH):
        self.path = Path(path)
        try:
            with closing(self._connect()):
                pass
        except (sqlite3.Error, OSError) as e:
            raise DatabaseError(str(e)) from e

    def _connect(self) -> sqlite3.Connection:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            _ensure_schema(conn)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def save_session(self, record: SessionRecord) -> SessionRecord:
        values = tuple(getattr(record, c) for c in _COLUMNS)
        placeholders = ",".join("?" for _ in _COLUMNS)
        try:
            with closing(self._connect()) as conn:
                cur = conn.execute(
                    f"INSERT INTO typing_sessions({','.join(_COLUMNS)}) VALUES ({placeholders})",
                    values,
                )
                conn.commit()
                return replace(record, id=cur.lastrowid)
        except (sqlite3.Error, OSError) as e:
            raise DatabaseError(str(e)) from e

    def list_recent_sessions(self, limit: int = 10) -> List[SessionRecord]:
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute(
                    "SELECT * FROM typing_sessions ORDER BY created_at DESC, id DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        except (sqlite3.Error, OSError) as e:
            raise DatabaseError(str(e)) from e
        return [_row_to_record(r) for r in rows]

    def get_aggregate_stats(self) -> AggregateStats:
        try:
            with closing(self._connect()) as conn:
                row = conn.execute("""
                    SELECT
                        COUNT(*) AS total_sessions,
                        AVG(wpm) AS avg_wpm,
                        MAX(wpm) AS best_wpm,
                        AVG(accuracy_percentage) AS avg_accuracy,
                        SUM(duration_seconds) AS total_practice_time
                    FROM typing_sessions
                """).fetchone()
        except (sqlite3.Error, OSError) as e:
            raise DatabaseError(str(e)) from e
        # AVG/MAX/SUM are NULL on an empty table
        return AggregateStats(
            total_sessions=row["total_sessions"],
            average_wpm=row["avg_wpm"] or 0.0,
            best_wpm=row["best_wpm"] or 0.0,
            average_accuracy=row["avg_accuracy"] or 0.0,
            total_practice_time_seconds=row["total_practice_time"] or 0.0,
        )

    def daily_stats(self, limit: int = 100) -> List[DailyStats]:
        return daily_stats(self.list_recent_sessions(limit))
