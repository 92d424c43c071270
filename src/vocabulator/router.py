"""Key handling for the tutorial screen.

The tutorial overlays the real menu and practice screens. Before a key is
checked against the current step, this module resolves the exit and
congratulations dialogs, moves the previewed menu cursor, and applies
practice keys to the tutorial's own sample session, so doing the real action
is what completes the step.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

from .keys import KeyCode, KeyEvent
from .models import Screen, Session
from .tutorial import (
    AUTO_ADVANCE_STEP,
    COMPLETION_MARKER,
    Complete,
    Invalid,
    KeyPress,
    TutorialPhase,
    TutorialState,
    TutorialStep,
    Valid,
    ValidationResult,
    get_current_step,
    init_tutorial,
    is_menu_step,
    is_practice_step,
    key_matches,
    should_auto_advance,
    validate_and_advance,
)

if TYPE_CHECKING:
    from .app import App

logger = logging.getLogger(__name__)

QUIT_KEY = KeyEvent.key("q")


def start_tutorial(app: App) -> None:
    """Open the tutorial from step 0 with a fresh sample session."""
    app.tutorial_state = init_tutorial(app.clock)
    app.selected = 0
    app.error = None
    app.current_screen = Screen.TUTORIAL
    logger.info("Tutorial started")


def _leave_tutorial(app: App) -> None:
    app.tutorial_state = None
    app.selected = 0
    app.current_screen = Screen.MENU


def _is_quit(key: KeyEvent) -> bool:
    return key.code is KeyCode.ESC or key.is_char("q")


def _step_expects_quit(step: TutorialStep) -> bool:
    """Whether the step is completed by the quit key itself."""
    return isinstance(step.validation, KeyPress) and key_matches(step.validation.expected, QUIT_KEY)


def _move_menu_cursor(app: App, key: KeyEvent) -> None:
    if key.code is KeyCode.DOWN or key.is_char("j"):
        app.next()
    elif key.code is KeyCode.UP or key.is_char("k"):
        app.previous()


def forward_practice_key(session: Session, key: KeyEvent) -> None:
    """Apply a practice key to the sample session. Nothing is persisted."""
    if key.is_char("m"):
        word = session.current()
        word.marked = not word.marked
    elif key.is_char("s"):
        session.show_definition = True
    elif key.is_char("y"):
        session.graded = True
    elif key.is_char("n"):
        session.graded = False
    elif key.code is KeyCode.ENTER:
        session.advance()


def _handle_exit_confirmation(app: App, state: TutorialState, key: KeyEvent) -> None:
    if key.is_char("y", "Y"):
        logger.info("Tutorial exited at step %d", state.current_step)
        app.error = None
        _leave_tutorial(app)
    elif key.is_char("n", "N") or key.code is KeyCode.ESC:
        state.cancel_exit(app.clock())


def _complete(app: App, state: TutorialState) -> None:
    """Show the congratulations dialog and persist the completion flag."""
    state.completed_actions.append(COMPLETION_MARKER)
    state.phase = TutorialPhase.SHOWING_COMPLETION
    app.error = None
    try:
        app.service.mark_tutorial_completed()
    except sqlite3.Error as exc:
        logger.error("Failed to mark tutorial as completed", exc_info=True)
        app.error = f"Could not save tutorial completion: {exc}"
    logger.info("Tutorial completed")


def handle_tutorial_event(app: App, key: KeyEvent) -> ValidationResult | None:
    """Handle one key press on the tutorial screen.

    Returns the step validation outcome, or None when the key was consumed by
    a dialog, the quit request or the timed step.
    """
    state = app.tutorial_state
    if state is None:
        app.current_screen = Screen.MENU
        return None

    if state.phase is TutorialPhase.SHOWING_COMPLETION:
        _leave_tutorial(app)
        return None

    if state.phase is TutorialPhase.CONFIRMING_EXIT:
        _handle_exit_confirmation(app, state, key)
        return None

    step = get_current_step(state)
    # The step that asks for q/Esc receives it; intercepting there would make
    # the tutorial impossible to finish.
    if _is_quit(key) and not _step_expects_quit(step):
        state.request_exit(app.clock())
        return None

    if state.current_step == AUTO_ADVANCE_STEP:
        state.enter_step(AUTO_ADVANCE_STEP + 1, app.clock())
        app.error = None
        return None

    if is_menu_step(step):
        _move_menu_cursor(app, key)
    if is_practice_step(step) and state.sample_session is not None:
        forward_practice_key(state.sample_session, key)

    result = validate_and_advance(state, app.selected, key, now=app.clock())
    if isinstance(result, Valid):
        app.error = None
    elif isinstance(result, Invalid):
        app.error = result.hint
    elif isinstance(result, Complete):
        _complete(app, state)
    return result


def tick_tutorial(app: App) -> bool:
    """Leave the timed step once its countdown runs out; return True if it did."""
    state = app.tutorial_state
    if state is None or state.phase is not TutorialPhase.RUNNING:
        return False
    now = app.clock()
    if not should_auto_advance(state, now):
        return False
    state.enter_step(AUTO_ADVANCE_STEP + 1, now)
    app.error = None
    return True
