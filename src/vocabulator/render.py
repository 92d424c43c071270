"""Plain-text frames for each screen."""

from __future__ import annotations

import time

from .app import PROMPT_OPTIONS, App
from .models import Screen, Session
from .tutorial import (
    AUTO_ADVANCE_STEP,
    KeyHint,
    MenuOption,
    TutorialState,
    TutorialStep,
    get_current_step,
    is_menu_step,
    is_practice_step,
    seconds_until_auto_advance,
)

PRACTICE_ACTIONS = (("Show", "s"), ("Correct", "y"), ("Wrong", "n"), ("Mark", "m"), ("Next", "Enter"))

EXIT_DIALOG = (
    "=== Exit Tutorial? ===",
    "Are you sure you want to exit the tutorial?",
    "Your progress will not be saved, but you can",
    "restart the tutorial anytime from the main menu.",
    "",
    "Press 'y' to exit and start learning",
    "Press 'n' or Escape to continue tutorial",
)

CONGRATULATIONS_DIALOG = (
    "=== Congratulations! ===",
    "You've completed the tutorial!",
    "",
    "You now know how to:",
    "- Navigate menus with arrow keys or j/k",
    "- Practice vocabulary words",
    "- Show definitions with 's'",
    "- Grade yourself with 'y' or 'n'",
    "- Bookmark words with 'm'",
    "- Move to the next word with Enter",
    "- Exit practice with 'q' or Escape",
    "",
    "There's also a Test mode where you type the word!",
    "Your progress auto-saves, so practice anytime!",
    "",
    "Press any key to start practicing!",
)


def relative_time(timestamp: int | None, now: float | None = None) -> str:
    """Format an epoch timestamp as '-', 'just now', '5m ago', '3h ago' or '2d ago'."""
    if timestamp is None:
        return "-"
    current = time.time() if now is None else now
    minutes = int((current - timestamp) // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def render(app: App) -> list[str]:
    """Return the lines to draw for the current screen."""
    if app.current_screen is Screen.TUTORIAL_PROMPT:
        lines = render_prompt(app.selected)
    elif app.current_screen is Screen.TUTORIAL:
        lines = render_tutorial(app)
    elif app.current_screen is Screen.PRACTICE and app.session is not None:
        lines = render_practice(app.session)
    elif app.current_screen is Screen.TEST and app.session is not None:
        lines = render_test(app.session)
    else:
        lines = render_menu([item.label for item in app.menu_items], app.selected)
    if app.error and app.current_screen is not Screen.TUTORIAL:
        lines += ["", f"Error: {app.error}"]
    return lines


def render_prompt(selected: int) -> list[str]:
    """Welcome screen offering the tutorial."""
    lines = ["=== Welcome to Vocabulator ==="]
    for idx, option in enumerate(PROMPT_OPTIONS):
        lines.append(f"{'> ' if idx == selected else '  '}{option}")
    return lines


def render_menu(labels: list[str], selected: int, highlight: int | None = None) -> list[str]:
    """Main menu; `highlight` marks the entry the tutorial points at."""
    lines = ["=== Main Menu ==="]
    for idx, label in enumerate(labels):
        prefix = "> " if idx == selected else "  "
        suffix = "   <--" if idx == highlight else ""
        lines.append(f"{prefix}{label}{suffix}")
    lines.append("")
    lines.append("[j/k] move  [Enter] select  [q] quit")
    return lines


def _word_header(session: Session) -> list[str]:
    word = session.current()
    star = "*" if word.marked else " "
    return [
        f"{star} WORD [{session.index + 1}/{len(session.words)}]    Group {word.group_id} | Id {word.id}",
        "",
    ]


def _grade_label(graded: bool | None) -> str:
    if graded is None:
        return ""
    return "  (correct)" if graded else "  (wrong)"


def render_action_bar(highlight: str | None = None) -> str:
    """Practice key hints, with the highlighted key shown in angle brackets."""
    highlighted = set(highlight.split("/")) if highlight else set()
    parts = []
    for label, key in PRACTICE_ACTIONS:
        parts.append(f"<{key}> {label}" if key in highlighted else f"[{key}] {label}")
    parts.append("[q] Back")
    return "  ".join(parts)


def render_practice(session: Session, highlight: str | None = None) -> list[str]:
    """Practice screen for the current word."""
    word = session.current()
    lines = ["=== Practice ==="]
    lines += _word_header(session)
    lines.append(f"    {word.word}{_grade_label(session.graded)}")
    lines.append("")
    lines.append("Definition:")
    if session.show_definition:
        lines += [f"  {line}" for line in word.definition.splitlines() or [""]]
    else:
        lines.append("  (hidden)")
    lines.append("")
    lines.append(f"Last Seen: {relative_time(word.last_seen)}")
    lines.append(f"Accuracy: {word.success_count}/{word.times_seen}")
    lines.append("")
    lines.append(render_action_bar(highlight))
    return lines


def render_test(session: Session) -> list[str]:
    """Test screen: type the word for the shown definition."""
    word = session.current()
    lines = ["=== Test ==="]
    lines += _word_header(session)
    lines.append("Definition:")
    lines += [f"  {line}" for line in word.definition.splitlines() or [""]]
    lines.append("")
    lines.append(f"Your answer: {session.input_buffer}_")
    if session.graded is not None:
        verdict = "Correct!" if session.graded else f"Wrong. The word was '{word.word}'."
        lines.append(verdict)
        lines.append("Press Enter for the next word.")
    lines.append("")
    lines.append("[Enter] check  [Backspace] delete  [Esc] back")
    return lines


def _progress_line(state: TutorialState) -> str:
    shown = min(state.current_step, state.total_steps - 1) + 1
    return f"Tutorial - Step {shown} of {state.total_steps}"


def render_tutorial(app: App, now: float | None = None) -> list[str]:
    """Tutorial screen: dialogs, menu preview, countdown or practice overlay."""
    state = app.tutorial_state
    if state is None:
        return []
    if state.showing_completion:
        lines = list(CONGRATULATIONS_DIALOG)
        if app.error:
            lines += ["", f"Error: {app.error}"]
        return lines
    if state.exit_requested:
        return list(EXIT_DIALOG)

    step = get_current_step(state)
    lines = [f"=== {_progress_line(state)} ===", step.instruction]
    if app.error:
        lines.append(f"Hint: {app.error}")
    lines.append("")
    lines += _tutorial_content(app, state, step, app.clock() if now is None else now)
    return lines


def _tutorial_content(app: App, state: TutorialState, step: TutorialStep, now: float) -> list[str]:
    highlight = step.highlight
    if is_practice_step(step) and state.sample_session is not None:
        key_hint = highlight.label if isinstance(highlight, KeyHint) else None
        return render_practice(state.sample_session, key_hint)
    if is_menu_step(step):
        menu_index = highlight.index if isinstance(highlight, MenuOption) else None
        return render_menu([item.label for item in app.menu_items], app.selected, menu_index)
    if step.id == AUTO_ADVANCE_STEP:
        remaining = seconds_until_auto_advance(state, now)
        plural = "" if remaining == 1 else "s"
        return [
            "Get ready to practice!",
            "You'll see a vocabulary word.",
            "Try to recall its definition before revealing it.",
            "",
            f"Auto-advancing in {remaining} second{plural}...",
            "(or press any key to continue)",
        ]
    if step.id == 0:
        return [
            "This interactive tutorial will guide you through",
            "all the features of the application.",
            "",
            "You'll learn by doing - the tutorial will",
            "wait for you to perform each action correctly.",
        ]
    return [
        "You now know how to navigate menus, practice words,",
        "grade yourself, bookmark words and leave a session.",
    ]
