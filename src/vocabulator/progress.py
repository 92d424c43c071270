"""SQLite persistence for words, practice progress and app settings."""

from __future__ import annotations

import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from .models import Screen, Word

SCHEMA_VERSION = 2
TUTORIAL_COMPLETED_KEY = "tutorial_completed"
DEFAULT_PROGRESS = (Screen.PRACTICE, 1, 0)

logger = logging.getLogger(__name__)


class ProgressStore:
    """Database access layer for vocabulary and learner progress."""

    def __init__(self, db_path: Path | str) -> None:
        """Open the database and bring its schema up to date."""
        if isinstance(db_path, Path):
            db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_path)
        else:
            target = db_path
        self._conn = sqlite3.connect(target)
        self._conn.row_factory = sqlite3.Row
        self._apply_migrations()
        logger.debug("Opened progress store at %s", target)

    def _apply_migrations(self) -> None:
        """Apply forward-only schema migrations to latest version."""
        current = int(self._conn.execute("PRAGMA user_version").fetchone()[0])
        if current > SCHEMA_VERSION:
            raise RuntimeError(f"Database schema version {current} is newer than supported {SCHEMA_VERSION}.")

        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """)

        for version in range(current + 1, SCHEMA_VERSION + 1):
            if version == 1:
                self._migrate_to_v1()
            elif version == 2:
                self._migrate_to_v2()
            with self._conn:
                self._conn.execute(f"PRAGMA user_version = {version}")
                self._conn.execute(
                    "INSERT OR REPLACE INTO schema_migrations (version, applied_at) VALUES (?, ?)",
                    (version, datetime.now(UTC).isoformat()),
                )
            logger.debug("Applied schema migration %d", version)

    def _migrate_to_v1(self) -> None:
        """Create word and progress tables."""
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS words (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    word TEXT NOT NULL,
                    definition TEXT NOT NULL,
                    group_id INTEGER NOT NULL,
                    marked INTEGER NOT NULL DEFAULT 0,
                    last_seen INTEGER,
                    times_seen INTEGER NOT NULL DEFAULT 0,
                    success_count INTEGER NOT NULL DEFAULT 0,
                    UNIQUE (word, group_id)
                )
                """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS progress (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    screen TEXT NOT NULL,
                    group_id INTEGER NOT NULL,
                    word_index INTEGER NOT NULL
                )
                """)

    def _migrate_to_v2(self) -> None:
        """Add key/value settings used for the tutorial completion flag."""
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """)

    def add_word(self, word: str, definition: str, group_id: int) -> bool:
        """Insert a word unless the same word already exists in the group."""
        with self._conn:
            cursor = self._conn.execute(
                "INSERT OR IGNORE INTO words (word, definition, group_id) VALUES (?, ?, ?)",
                (word, definition, group_id),
            )
        return cursor.rowcount > 0

    def count_words(self) -> int:
        """Return number of stored words."""
        return int(self._conn.execute("SELECT COUNT(*) FROM words").fetchone()[0])

    def fetch_words_by_group(self, group_id: int) -> list[Word]:
        """Return words of one group in insertion order."""
        rows = self._conn.execute(
            "SELECT * FROM words WHERE group_id = ? ORDER BY id",
            (group_id,),
        ).fetchall()
        return [_word_from_row(row) for row in rows]

    def fetch_marked_words(self) -> list[Word]:
        """Return bookmarked words across all groups."""
        rows = self._conn.execute("SELECT * FROM words WHERE marked = 1 ORDER BY group_id, id").fetchall()
        return [_word_from_row(row) for row in rows]

    def fetch_weak_words(self, limit: int = 20, threshold: float = 0.6) -> list[Word]:
        """Return seen words whose success ratio is below `threshold`, weakest first."""
        rows = self._conn.execute(
            """
            SELECT * FROM words
            WHERE times_seen > 0 AND (CAST(success_count AS REAL) / times_seen) < ?
            ORDER BY (CAST(success_count AS REAL) / times_seen) ASC, times_seen DESC, id ASC
            LIMIT ?
            """,
            (threshold, limit),
        ).fetchall()
        return [_word_from_row(row) for row in rows]

    def fetch_final_group(self) -> int | None:
        """Return highest group id, or None when no words exist."""
        value = self._conn.execute("SELECT MAX(group_id) FROM words").fetchone()[0]
        return int(value) if value is not None else None

    def update_word_stats(self, word: Word) -> None:
        """Persist a word's practice statistics."""
        with self._conn:
            self._conn.execute(
                """
                UPDATE words
                SET last_seen = ?, times_seen = ?, success_count = ?
                WHERE id = ?
                """,
                (word.last_seen, word.times_seen, word.success_count, word.id),
            )

    def set_marked(self, word_id: int, marked: bool) -> None:
        """Persist a word's bookmark flag."""
        with self._conn:
            self._conn.execute("UPDATE words SET marked = ? WHERE id = ?", (int(marked), word_id))

    def fetch_progress(self) -> tuple[Screen, int, int]:
        """Return saved (screen, group_id, word_index), defaulting to the first group."""
        row = self._conn.execute("SELECT screen, group_id, word_index FROM progress WHERE id = 1").fetchone()
        if row is None:
            return DEFAULT_PROGRESS
        try:
            screen = Screen(str(row["screen"]))
        except ValueError:
            screen = Screen.PRACTICE
        return (screen, int(row["group_id"]), int(row["word_index"]))

    def save_progress(self, screen: Screen, group_id: int, index: int) -> None:
        """Store the resume point for group sessions."""
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO progress (id, screen, group_id, word_index)
                VALUES (1, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    screen = excluded.screen,
                    group_id = excluded.group_id,
                    word_index = excluded.word_index
                """,
                (screen.value, group_id, index),
            )

    def get_tutorial_completed(self) -> bool:
        """Return the tutorial completion flag (False when never set)."""
        row = self._conn.execute("SELECT value FROM settings WHERE key = ?", (TUTORIAL_COMPLETED_KEY,)).fetchone()
        if row is None:
            return False
        return str(row["value"]) == "1"

    def set_tutorial_completed(self, completed: bool) -> None:
        """Store the tutorial completion flag."""
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO settings (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (TUTORIAL_COMPLETED_KEY, "1" if completed else "0"),
            )

    def close(self) -> None:
        """Close db connection."""
        self._conn.close()

    def __del__(self) -> None:  # pragma: no cover
        """Best-effort connection cleanup."""
        try:
            self.close()
        except Exception:
            pass


def _word_from_row(row: sqlite3.Row) -> Word:
    """Build a word from a `words` table row."""
    return Word(
        id=int(row["id"]),
        word=str(row["word"]),
        definition=str(row["definition"]),
        group_id=int(row["group_id"]),
        marked=bool(row["marked"]),
        last_seen=int(row["last_seen"]) if row["last_seen"] is not None else None,
        times_seen=int(row["times_seen"]),
        success_count=int(row["success_count"]),
    )
