"""SQLite cache of per-file turns, keyed by file size and mtime."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

import orjson

from cctime.types.turns import Turn

logger = logging.getLogger(__name__)

CACHE_DIR = Path.home() / ".cache" / "cctime"
DEFAULT_GAP_SECONDS = 15 * 60.0


class TurnCache:
    """Caches segmented turns to avoid re-parsing unchanged JSONL files."""

    def __init__(self, db_path: str | None = None):
        if db_path is None:
            CACHE_DIR.mkdir(parents=True, exist_ok=True)
            db_path = str(CACHE_DIR / "turns.db")
        self._db_path = db_path
        self._conn = sqlite3.connect(db_path)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._conn.row_factory = sqlite3.Row
        self._create_table()

    def _create_table(self):
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS file_turns (
                file_path TEXT PRIMARY KEY,
                session_id TEXT NOT NULL,
                file_size INTEGER NOT NULL,
                mtime REAL NOT NULL,
                gap_seconds REAL NOT NULL,
                decode_failures INTEGER NOT NULL DEFAULT 0,
                turns BLOB NOT NULL
            )
        """)
        self._conn.commit()

    def get(
        self,
        file_path: str,
        file_size: int,
        mtime: float,
        gap_seconds: float = DEFAULT_GAP_SECONDS,
    ) -> tuple[list[Turn], int] | None:
        """Return (turns, decode_failures) if cached and not stale, else None."""
        row = self._conn.execute(
            "SELECT * FROM file_turns WHERE file_path = ?",
            (file_path,)
        ).fetchone()
        if row is None:
            return None
        if row["file_size"] != file_size or abs(row["mtime"] - mtime) > 0.001:
            return None
        if row["gap_seconds"] != gap_seconds:
            return None
        try:
            turns = [_turn_from_dict(d) for d in orjson.loads(row["turns"])]
        except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding corrupt cache entry for %s: %s", file_path, e)
            self.remove(file_path)
            return None
        return turns, row["decode_failures"]

    def put(
        self,
        file_path: str,
        session_id: str,
        file_size: int,
        mtime: float,
        turns: list[Turn],
        decode_failures: int = 0,
        gap_seconds: float = DEFAULT_GAP_SECONDS,
    ):
        blob = orjson.dumps([_turn_to_dict(t) for t in turns])
        self._conn.execute("""
            INSERT OR REPLACE INTO file_turns
            (file_path, session_id, file_size, mtime, gap_seconds, decode_failures, turns)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (file_path, session_id, file_size, mtime, gap_seconds, decode_failures, blob))
        self._conn.commit()

    def remove(self, file_path: str):
        self._conn.execute(
            "DELETE FROM file_turns WHERE file_path = ?",
            (file_path,)
        )
        self._conn.commit()

    def clear(self):
        self._conn.execute("DELETE FROM file_turns")
        self._conn.commit()

    def close(self):
        self._conn.close()


def _turn_to_dict(turn: Turn) -> dict:
    return {
        "trigger": turn.trigger_timestamp.isoformat(),
        "text": turn.trigger_text,
        "first": turn.first_response_timestamp.isoformat(),
        "last": turn.last_response_timestamp.isoformat(),
        "activity": turn.activity_count,
        "tools": turn.tool_invocation_count,
        "session_id": turn.session_id,
        "source_path": turn.source_path,
    }


def _turn_from_dict(d: dict) -> Turn:
    return Turn(
        trigger_timestamp=datetime.fromisoformat(d["trigger"]),
        trigger_text=d["text"],
        first_response_timestamp=datetime.fromisoformat(d["first"]),
        last_response_timestamp=datetime.fromisoformat(d["last"]),
        activity_count=d["activity"],
        tool_invocation_count=d["tools"],
        session_id=d["session_id"],
        source_path=d["source_path"],
    )
