from vocabulator.app import App
from vocabulator.models import Screen
from vocabulator.render import (
    CONGRATULATIONS_DIALOG,
    EXIT_DIALOG,
    relative_time,
    render,
    render_action_bar,
    render_menu,
    render_practice,
)
from vocabulator.router import start_tutorial
from vocabulator.tutorial import TutorialPhase, create_sample_session


def test_relative_time_buckets() -> None:
    now = 1_000_000.0
    assert relative_time(None, now=now) == "-"
    assert relative_time(int(now) - 30, now=now) == "just now"
    assert relative_time(int(now) - 5 * 60, now=now) == "5m ago"
    assert relative_time(int(now) - 3 * 3600, now=now) == "3h ago"
    assert relative_time(int(now) - 2 * 86400, now=now) == "2d ago"


def test_action_bar_highlights_keys() -> None:
    assert render_action_bar() == "[s] Show  [y] Correct  [n] Wrong  [m] Mark  [Enter] Next  [q] Back"
    bar = render_action_bar("y/n")
    assert "<y> Correct" in bar and "<n> Wrong" in bar
    assert "[s] Show" in bar


def test_menu_marks_cursor_and_highlight() -> None:
    lines = render_menu(["A", "B", "C"], selected=2, highlight=0)
    assert lines[1] == "  A   <--"
    assert lines[3] == "> C"


def test_practice_hides_definition_until_revealed() -> None:
    session = create_sample_session()
    lines = render_practice(session)
    assert "  (hidden)" in lines
    assert "    ephemeral" in lines
    assert "Last Seen: -" in lines

    session.show_definition = True
    session.graded = True
    session.current().marked = True
    lines = render_practice(session)
    assert "  lasting for a very short time" in lines
    assert "    ephemeral  (correct)" in lines
    assert lines[1].startswith("* WORD [1/5]")


def test_menu_screen_shows_error(app: App) -> None:
    app.error = "Word list is empty"
    lines = render(app)
    assert lines[0] == "=== Main Menu ==="
    assert lines[-1] == "Error: Word list is empty"


def test_prompt_screen(app: App) -> None:
    app.current_screen = Screen.TUTORIAL_PROMPT
    app.selected = 1
    assert render(app) == ["=== Welcome to Vocabulator ===", "  Start Tutorial", "> Skip to Main Menu"]


def test_tutorial_frame_shows_progress_instruction_and_hint(app: App) -> None:
    start_tutorial(app)
    assert app.tutorial_state is not None
    app.tutorial_state.current_step = 1
    app.error = "Press Down arrow or 'j' to move the selection down."

    lines = render(app)
    assert lines[0] == "=== Tutorial - Step 2 of 14 ==="
    assert lines[1].startswith("Use the Down arrow")
    assert lines[2] == "Hint: Press Down arrow or 'j' to move the selection down."
    assert "  Review Marks   <--" in lines


def test_tutorial_countdown(app: App, clock) -> None:
    start_tutorial(app)
    assert app.tutorial_state is not None
    app.tutorial_state.enter_step(4, clock.now)
    clock.advance(9.5)
    assert "Auto-advancing in 1 second..." in render(app)


def test_tutorial_practice_overlay_uses_sample_session(app: App) -> None:
    start_tutorial(app)
    assert app.tutorial_state is not None
    app.tutorial_state.current_step = 7
    lines = render(app)
    assert "    ephemeral" in lines
    assert any("<m> Mark" in line for line in lines)


def test_tutorial_dialogs(app: App) -> None:
    start_tutorial(app)
    state = app.tutorial_state
    assert state is not None

    state.exit_requested = True
    assert render(app) == list(EXIT_DIALOG)

    state.phase = TutorialPhase.SHOWING_COMPLETION
    app.error = "Could not save tutorial completion: disk full"
    lines = render(app)
    assert lines[: len(CONGRATULATIONS_DIALOG)] == list(CONGRATULATIONS_DIALOG)
    assert lines[-1] == "Error: Could not save tutorial completion: disk full"
