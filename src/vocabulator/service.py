"""Application service for vocabulary sessions and tutorial progress."""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from pathlib import Path

from .models import Screen, Session, SessionType, Word
from .progress import ProgressStore
from .seed import seed_store

logger = logging.getLogger(__name__)


class SessionError(RuntimeError):
    """A practice session could not be started from stored data."""


class VocabService:
    """Coordinates stored words, resume points and the tutorial flag."""

    def __init__(self, db_path: Path | str) -> None:
        """Initialize service with database path."""
        self.progress = ProgressStore(db_path)

    def start_session(self, session_type: SessionType) -> tuple[Session, Screen]:
        """Build a session for `session_type` and return it with the screen to show."""
        if session_type is SessionType.GROUP:
            screen, group_id, index = self.progress.fetch_progress()
            words = self.progress.fetch_words_by_group(group_id)
        elif session_type is SessionType.MARKED:
            screen, index = Screen.PRACTICE, 0
            words = self.progress.fetch_marked_words()
        else:
            screen, index = Screen.PRACTICE, 0
            words = self.progress.fetch_weak_words()

        if not words:
            raise SessionError("Word list is empty")
        if not (0 <= index < len(words)):
            raise SessionError(f"Index {index} out of bounds for word list of length {len(words)}. Db corrupted")
        if screen not in (Screen.PRACTICE, Screen.TEST):
            screen = Screen.PRACTICE

        session = Session(words=words, index=index, session_type=session_type)
        logger.debug("Started %s session with %d words at index %d", session_type.value, len(words), index)
        return session, screen

    def toggle_mark(self, word: Word) -> bool:
        """Persist the flipped bookmark, then apply it to `word`; return the new value."""
        marked = not word.marked
        self.progress.set_marked(word.id, marked)
        word.marked = marked
        return marked

    def record_grade(self, word: Word, correct: bool, now: int | None = None) -> None:
        """Persist statistics for one graded viewing; `word` is updated only after the write."""
        updated = replace(
            word,
            last_seen=int(time.time()) if now is None else now,
            times_seen=word.times_seen + 1,
            success_count=word.success_count + int(correct),
        )
        self.progress.update_word_stats(updated)
        word.last_seen = updated.last_seen
        word.times_seen = updated.times_seen
        word.success_count = updated.success_count

    def save_progress(self, screen: Screen, group_id: int, index: int) -> None:
        """Store the group-session resume point, wrapping past the final group."""
        final_group = self.progress.fetch_final_group() or 1
        if group_id > final_group:
            group_id = 1
            index = 0
        self.progress.save_progress(screen, group_id, index)

    def is_tutorial_completed(self) -> bool:
        """Return whether the tutorial has been finished."""
        return self.progress.get_tutorial_completed()

    def mark_tutorial_completed(self) -> None:
        """Record that the tutorial was finished."""
        self.progress.set_tutorial_completed(True)

    def reset_tutorial(self) -> None:
        """Clear the tutorial completion flag so the tutorial is offered again."""
        self.progress.set_tutorial_completed(False)

    def seed_file(self, path: Path | str) -> int:
        """Import a word list file; return the number of new words."""
        return seed_store(self.progress, path)

    def close(self) -> None:
        """Close underlying store."""
        self.progress.close()
