"""Core domain models for vocabulary practice sessions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Screen(Enum):
    """Top-level screens of the terminal application."""

    MENU = "menu"
    PRACTICE = "practice"
    TEST = "test"
    TUTORIAL_PROMPT = "tutorial_prompt"
    TUTORIAL = "tutorial"


class SessionType(Enum):
    """Which words a practice session draws from."""

    GROUP = "group"
    MARKED = "marked"
    WEAK = "weak"

    @property
    def label(self) -> str:
        """Menu label for this session type."""
        return _SESSION_LABELS[self]


_SESSION_LABELS = {
    SessionType.GROUP: "Continue Learning",
    SessionType.MARKED: "Review Marks",
    SessionType.WEAK: "Revise Weak",
}


@dataclass
class Word:
    """One vocabulary entry with its practice statistics."""

    id: int
    word: str
    definition: str
    group_id: int
    marked: bool = False
    last_seen: int | None = None
    times_seen: int = 0
    success_count: int = 0


@dataclass
class Session:
    """Ordered words being practiced plus transient per-word UI flags."""

    words: list[Word]
    index: int = 0
    session_type: SessionType = SessionType.GROUP
    show_definition: bool = False
    graded: bool | None = None
    input_buffer: str = ""

    def current(self) -> Word:
        """Return the word at the current index."""
        return self.words[self.index]

    def is_last(self) -> bool:
        """Return whether the current word is the final one."""
        return self.index >= len(self.words) - 1

    def reset_ui_state(self) -> None:
        """Clear reveal, grade and typed input for a fresh word."""
        self.show_definition = False
        self.graded = None
        self.input_buffer = ""

    def advance(self) -> bool:
        """Move to the next word.

        Returns True when the session was already on its last word; the index
        is left unchanged in that case.
        """
        if self.is_last():
            return True
        self.index += 1
        self.reset_ui_state()
        return False

    def restart(self) -> None:
        """Rewind to the first word with clean UI flags."""
        self.index = 0
        self.reset_ui_state()
