"""SQLite-backed master record store with change detection and run history."""

import hashlib
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from partner_master.models.raw import RawRecord
from partner_master.models.record import MasterRecord

SCHEMA = """
CREATE TABLE IF NOT EXISTS master_records (
    parent_key TEXT PRIMARY KEY,
    content_hash TEXT NOT NULL,
    prior_content_hash TEXT,
    data TEXT NOT NULL,
    raw_data TEXT,
    first_seen_at TEXT NOT NULL,
    last_seen_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    source TEXT NOT NULL,
    started_at TEXT NOT NULL,
    finished_at TEXT,
    status TEXT NOT NULL,
    items_fetched INTEGER NOT NULL DEFAULT 0,
    items_new INTEGER NOT NULL DEFAULT 0,
    items_changed INTEGER NOT NULL DEFAULT 0,
    items_skipped INTEGER NOT NULL DEFAULT 0
);
"""


class RunRecord:
    """Record of a batch run."""

    def __init__(
        self,
        id: int,
        source: str,
        started_at: datetime,
        finished_at: Optional[datetime],
        status: str,
        items_fetched: int,
        items_new: int,
        items_changed: int,
        items_skipped: int,
    ):
        self.id = id
        self.source = source
        self.started_at = started_at
        self.finished_at = finished_at
        self.status = status
        self.items_fetched = items_fetched
        self.items_new = items_new
        self.items_changed = items_changed
        self.items_skipped = items_skipped


class MasterRecordStore:
    """
    SQLite store for master records keyed by parent key.
    content_hash over the enriched record detects changes between runs.
    """

    def __init__(self, db_path: str | Path = "partner_master.db"):
        self._db_path = Path(db_path)
        self._ensure_schema()

    def _connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.executescript(SCHEMA)

    @staticmethod
    def content_hash(record: MasterRecord) -> str:
        payload = json.dumps(record.model_dump(mode="json"), sort_keys=True, default=str)
        return hashlib.sha256(payload.encode()).hexdigest()

    def upsert(self, record: MasterRecord, raw: Optional[RawRecord] = None) -> tuple[bool, bool]:
        """
        Insert or update one master record. Returns (was_new, was_changed).
        """
        now = datetime.now(timezone.utc).isoformat()
        content_hash = self.content_hash(record)
        data_str = json.dumps(record.model_dump(mode="json"), default=str)
        raw_str = json.dumps(raw.model_dump(mode="json"), default=str) if raw else None
        was_new = False
        was_changed = False

        with self._connection() as conn:
            existing = conn.execute(
                "SELECT content_hash FROM master_records WHERE parent_key = ?",
                (record.parent_key,),
            ).fetchone()

            if existing:
                if existing["content_hash"] != content_hash:
                    was_changed = True
                    conn.execute(
                        """
                        UPDATE master_records SET
                            content_hash = ?, prior_content_hash = ?, data = ?,
                            raw_data = COALESCE(?, raw_data), last_seen_at = ?
                        WHERE parent_key = ?
                        """,
                        (content_hash, existing["content_hash"], data_str, raw_str, now, record.parent_key),
                    )
                else:
                    conn.execute(
                        "UPDATE master_records SET last_seen_at = ? WHERE parent_key = ?",
                        (now, record.parent_key),
                    )
            else:
                was_new = True
                conn.execute(
                    """
                    INSERT INTO master_records (parent_key, content_hash, data, raw_data, first_seen_at, last_seen_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (record.parent_key, content_hash, data_str, raw_str, now, now),
                )
            conn.commit()

        return (was_new, was_changed)

    def get(self, parent_key: str) -> Optional[MasterRecord]:
        """Get a single master record by parent key."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT data FROM master_records WHERE parent_key = ?", (parent_key,)
            ).fetchone()
        return MasterRecord.model_validate(json.loads(row["data"])) if row else None

    def get_all(self) -> list[MasterRecord]:
        """Return all master records ordered by parent key."""
        with self._connection() as conn:
            rows = conn.execute("SELECT data FROM master_records ORDER BY parent_key").fetchall()
        return [MasterRecord.model_validate(json.loads(r["data"])) for r in rows]

    def count(self) -> int:
        with self._connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM master_records").fetchone()[0]

    def start_run(self, source: str) -> RunRecord:
        """Record start of a batch run. Returns RunRecord with id."""
        now = datetime.now(timezone.utc).isoformat()
        with self._connection() as conn:
            cursor = conn.execute(
                "INSERT INTO runs (source, started_at, status) VALUES (?, ?, 'running')",
                (source, now),
            )
            conn.commit()
            run_id = cursor.lastrowid
        return RunRecord(
            id=run_id or 0,
            source=source,
            started_at=datetime.fromisoformat(now),
            finished_at=None,
            status="running",
            items_fetched=0,
            items_new=0,
            items_changed=0,
            items_skipped=0,
        )

    def finish_run(
        self,
        run_id: int,
        items_fetched: int,
        items_new: int,
        items_changed: int,
        items_skipped: int = 0,
        status: str = "completed",
    ) -> None:
        """Record completion (or failure) of a batch run."""
        now = datetime.now(timezone.utc).isoformat()
        with self._connection() as conn:
            conn.execute(
                """
                UPDATE runs SET finished_at = ?, status = ?, items_fetched = ?,
                    items_new = ?, items_changed = ?, items_skipped = ?
                WHERE id = ?
                """,
                (now, status, items_fetched, items_new, items_changed, items_skipped, run_id),
            )
            conn.commit()

    def get_run(self, run_id: int) -> Optional[RunRecord]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM runs WHERE id = ?", (run_id,)).fetchone()
        if not row:
            return None
        return RunRecord(
            id=row["id"],
            source=row["source"],
            started_at=datetime.fromisoformat(row["started_at"]),
            finished_at=datetime.fromisoformat(row["finished_at"]) if row["finished_at"] else None,
            status=row["status"],
            items_fetched=row["items_fetched"],
            items_new=row["items_new"],
            items_changed=row["items_changed"],
            items_skipped=row["items_skipped"],
        )
