"""Application state and key handling for the menu, prompt and practice screens."""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .keys import KeyCode, KeyEvent
from .models import Screen, Session, SessionType
from .router import handle_tutorial_event, start_tutorial, tick_tutorial
from .service import SessionError, VocabService
from .tutorial import Clock, TutorialState

logger = logging.getLogger(__name__)

PROMPT_OPTIONS = ("Start Tutorial", "Skip to Main Menu")


class MenuAction(Enum):
    """Main menu entries in display order."""

    CONTINUE_LEARNING = "continue_learning"
    REVIEW_MARKS = "review_marks"
    REVISE_WEAK = "revise_weak"
    RESTART_TUTORIAL = "restart_tutorial"
    EXIT = "exit"

    @property
    def session_type(self) -> SessionType | None:
        """Session started by this entry, if any."""
        return _ACTION_SESSIONS.get(self)

    @property
    def label(self) -> str:
        """Menu text."""
        session_type = self.session_type
        if session_type is not None:
            return session_type.label
        return "Restart Tutorial" if self is MenuAction.RESTART_TUTORIAL else "Exit"


_ACTION_SESSIONS = {
    MenuAction.CONTINUE_LEARNING: SessionType.GROUP,
    MenuAction.REVIEW_MARKS: SessionType.MARKED,
    MenuAction.REVISE_WEAK: SessionType.WEAK,
}

MENU_ITEMS: tuple[MenuAction, ...] = tuple(MenuAction)


@dataclass
class App:
    """Everything the event loop mutates between frames."""

    service: VocabService
    current_screen: Screen = Screen.MENU
    menu_items: tuple[MenuAction, ...] = MENU_ITEMS
    selected: int = 0
    session: Session | None = None
    tutorial_state: TutorialState | None = None
    error: str | None = None
    should_quit: bool = False
    clock: Clock = time.monotonic

    def next(self) -> None:
        """Move the menu cursor down, wrapping to the top."""
        self.selected = (self.selected + 1) % len(self.menu_items)

    def previous(self) -> None:
        """Move the menu cursor up, wrapping to the bottom."""
        self.selected = (self.selected - 1) % len(self.menu_items)


def initial_screen(service: VocabService) -> Screen:
    """Offer the tutorial until it has been completed once."""
    return Screen.MENU if service.is_tutorial_completed() else Screen.TUTORIAL_PROMPT


def _is_down(key: KeyEvent) -> bool:
    return key.code is KeyCode.DOWN or key.is_char("j")


def _is_up(key: KeyEvent) -> bool:
    return key.code is KeyCode.UP or key.is_char("k")


def _is_back(key: KeyEvent) -> bool:
    return key.code is KeyCode.ESC or key.is_char("q")


def handle_menu_event(app: App, key: KeyEvent) -> None:
    """Navigate and select main menu entries."""
    app.error = None
    if _is_back(key):
        app.should_quit = True
    elif _is_down(key):
        app.next()
    elif _is_up(key):
        app.previous()
    elif key.code is KeyCode.ENTER:
        _select_menu_item(app)


def _select_menu_item(app: App) -> None:
    action = app.menu_items[app.selected]
    if action is MenuAction.EXIT:
        app.should_quit = True
        return

    if action is MenuAction.RESTART_TUTORIAL:
        try:
            app.service.reset_tutorial()
        except sqlite3.Error as exc:
            logger.error("Failed to restart tutorial", exc_info=True)
            app.error = f"Failed to restart tutorial: {exc}"
            return
        start_tutorial(app)
        return

    session_type = action.session_type
    if session_type is None:  # pragma: no cover
        return
    try:
        session, screen = app.service.start_session(session_type)
    except SessionError as exc:
        logger.warning("Could not start %s session: %s", session_type.value, exc)
        app.error = str(exc)
        return
    app.session = session
    app.current_screen = screen


def handle_prompt_event(app: App, key: KeyEvent) -> None:
    """Choose between starting the tutorial and skipping to the menu."""
    if _is_down(key) or _is_up(key):
        app.selected = (app.selected + 1) % len(PROMPT_OPTIONS)
    elif key.code is KeyCode.ENTER:
        if app.selected == 0:
            start_tutorial(app)
        else:
            app.selected = 0
            app.current_screen = Screen.MENU


def _leave_session(app: App) -> None:
    app.session = None
    app.selected = 0
    app.current_screen = Screen.MENU


def handle_practice_event(app: App, key: KeyEvent) -> None:
    """Reveal, self-grade, bookmark and advance through a practice pass."""
    session = app.session
    if session is None:
        _leave_session(app)
        return
    app.error = None

    if _is_back(key):
        _leave_session(app)
    elif key.is_char("s"):
        session.show_definition = True
    elif key.is_char("y", "n"):
        if not session.show_definition:
            app.error = "Reveal the definition with 's' before grading."
            return
        session.graded = key.is_char("y")
    elif key.is_char("m"):
        app.service.toggle_mark(session.current())
    elif key.code is KeyCode.ENTER:
        handle_enter(app)


def handle_test_event(app: App, key: KeyEvent) -> None:
    """Type the word for the shown definition, then Enter to grade and again to move on."""
    session = app.session
    if session is None:
        _leave_session(app)
        return
    app.error = None

    if key.code is KeyCode.ESC:
        _leave_session(app)
        return

    if session.graded is not None:
        if key.code is KeyCode.ENTER:
            handle_enter(app)
        return

    if key.code is KeyCode.ENTER:
        guess = session.input_buffer.strip()
        if not guess:
            app.error = "Type the word first."
            return
        session.graded = guess.lower() == session.current().word.lower()
        session.show_definition = True
    elif key.code is KeyCode.BACKSPACE:
        session.input_buffer = session.input_buffer[:-1]
    elif key.code is KeyCode.CHAR and key.char is not None and key.char.isprintable():
        session.input_buffer += key.char


def handle_enter(app: App) -> None:
    """Record the graded word and move on, switching screens when a pass ends.

    A finished practice pass continues as a test pass over the same words; a
    finished test pass moves the resume point to the next group and returns to
    the menu.
    """
    session = app.session
    if session is None:
        return
    if app.current_screen is Screen.PRACTICE and not session.show_definition:
        return
    if session.graded is None:
        return

    word = session.current()
    app.service.record_grade(word, session.graded)
    finished = session.advance()
    track_group = session.session_type is SessionType.GROUP

    if not finished:
        if track_group:
            app.service.save_progress(app.current_screen, word.group_id, session.index)
        return

    if app.current_screen is Screen.PRACTICE:
        session.restart()
        app.current_screen = Screen.TEST
        if track_group:
            app.service.save_progress(Screen.TEST, word.group_id, 0)
        return

    if track_group:
        app.service.save_progress(Screen.PRACTICE, word.group_id + 1, 0)
    _leave_session(app)


_HANDLERS: dict[Screen, Callable[[App, KeyEvent], object]] = {
    Screen.MENU: handle_menu_event,
    Screen.TUTORIAL_PROMPT: handle_prompt_event,
    Screen.PRACTICE: handle_practice_event,
    Screen.TEST: handle_test_event,
    Screen.TUTORIAL: handle_tutorial_event,
}


def dispatch(app: App, key: KeyEvent) -> None:
    """Send one key press to the handler of the current screen."""
    handler = _HANDLERS[app.current_screen]
    try:
        handler(app, key)
    except sqlite3.Error as exc:
        logger.error("Database error on %s screen", app.current_screen.value, exc_info=True)
        app.error = f"Database error: {exc}"


def tick(app: App) -> bool:
    """Run time-driven updates; return True when something changed."""
    if app.current_screen is Screen.TUTORIAL:
        return tick_tutorial(app)
    return False
