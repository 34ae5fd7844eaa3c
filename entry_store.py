from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from entries import EntryFields, TimeEntry

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS time_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_date TEXT NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    total_hours REAL NOT NULL,
    day TEXT NOT NULL,
    month TEXT NOT NULL,
    year INTEGER NOT NULL,
    site_location TEXT NOT NULL DEFAULT 'Office',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_time_entries_period ON time_entries (year, month);
CREATE INDEX IF NOT EXISTS ix_time_entries_date ON time_entries (entry_date);
"""


def connect(path: Union[str, Path]) -> sqlite3.Connection:
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    return conn


def init_db(path: Union[str, Path]) -> None:
    conn = connect(path)
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _row_to_entry(row: sqlite3.Row) -> TimeEntry:
    return TimeEntry(
        id=row["id"],
        date=date.fromisoformat(row["entry_date"]),
        start_time=row["start_time"],
        end_time=row["end_time"],
        total_hours=row["total_hours"],
        day=row["day"],
        month=row["month"],
        year=row["year"],
        site_location=row["site_location"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class EntryStore:
    """Time entry persistence over an open SQLite connection.

    The connection is owned by the caller; the store never opens or closes it.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, entry_id: int) -> Optional[TimeEntry]:
        row = self.conn.execute(
            "SELECT * FROM time_entries WHERE id = ?", (entry_id,)
        ).fetchone()
        if row is None:
            return None
        return _row_to_entry(row)

    def insert(self, fields: EntryFields) -> TimeEntry:
        now = _utcnow()
        cur = self.conn.execute(
            """
            INSERT INTO time_entries
            (entry_date, start_time, end_time, total_hours, day, month, year, site_location, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                fields.date.isoformat(),
                fields.start_time,
                fields.end_time,
                fields.total_hours,
                fields.day,
                fields.month,
                fields.year,
                fields.site_location,
                now,
                now,
            ),
        )
        self.conn.commit()
        logger.info("Created time entry %s for %s", cur.lastrowid, fields.date.isoformat())
        return self.get(cur.lastrowid)

    def update(self, entry_id: int, fields: EntryFields) -> Optional[TimeEntry]:
        cur = self.conn.execute(
            """
            UPDATE time_entries
            SET entry_date = ?, start_time = ?, end_time = ?, total_hours = ?, day = ?, month = ?, year = ?,
                site_location = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                fields.date.isoformat(),
                fields.start_time,
                fields.end_time,
                fields.total_hours,
                fields.day,
                fields.month,
                fields.year,
                fields.site_location,
                _utcnow(),
                entry_id,
            ),
        )
        self.conn.commit()
        if cur.rowcount == 0:
            return None
        logger.info("Updated time entry %s", entry_id)
        return self.get(entry_id)

    def delete(self, entry_id: int) -> bool:
        cur = self.conn.execute("DELETE FROM time_entries WHERE id = ?", (entry_id,))
        self.conn.commit()
        if cur.rowcount == 0:
            return False
        logger.info("Deleted time entry %s", entry_id)
        return True

    def list_all(self) -> List[TimeEntry]:
        rows = self.conn.execute(
            "SELECT * FROM time_entries ORDER BY entry_date DESC, id DESC"
        ).fetchall()
        return [_row_to_entry(row) for row in rows]

    def query(self, year: Optional[int] = None, month: Optional[str] = None) -> List[TimeEntry]:
        """Entries matching the stored year/month fields, oldest date first."""
        clauses = []
        params: list = []
        if year is not None:
            clauses.append("year = ?")
            params.append(year)
        if month is not None:
            clauses.append("month = ?")
            params.append(month)
        sql = "SELECT * FROM time_entries"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY entry_date ASC, id ASC"
        rows = self.conn.execute(sql, params).fetchall()
        return [_row_to_entry(row) for row in rows]

    def ping(self) -> bool:
        try:
            self.conn.execute("SELECT 1").fetchone()
        except sqlite3.Error:
            logger.warning("Database ping failed", exc_info=True)
            return False
        return True
