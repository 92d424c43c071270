"""Guided tutorial: step catalog, sample session and step validation.

The tutorial walks a new user through the real menu and practice controls.
Each step names a rule that decides whether a key press completes it;
`validate_and_advance` is the only function that moves `current_step`
forward, one step at a time.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from .keys import KeyCode, KeyEvent
from .models import Session, SessionType, Word

TUTORIAL_GROUP_ID = -1
AUTO_ADVANCE_STEP = 4
AUTO_ADVANCE_SECONDS = 10.0
GENERIC_HINT = "Try again."
COMPLETION_MARKER = "tutorial_completed"

Clock = Callable[[], float]

SAMPLE_WORDS: tuple[tuple[str, str], ...] = (
    ("ephemeral", "lasting for a very short time"),
    ("ubiquitous", "present, appearing, or found everywhere"),
    ("serendipity", "the occurrence of events by chance in a happy way"),
    ("eloquent", "fluent or persuasive in speaking or writing"),
    ("pragmatic", "dealing with things sensibly and realistically"),
)


# Validation rules ---------------------------------------------------------


@dataclass(frozen=True)
class KeyPress:
    """Completed by the expected key or one of its accepted alternates."""

    expected: KeyEvent


@dataclass(frozen=True)
class KeyPressAny:
    """Completed by any one of several keys."""

    accepted: tuple[KeyEvent, ...]


@dataclass(frozen=True)
class MenuSelection:
    """Completed by Enter while the menu cursor sits on `index`."""

    index: int


class Condition(Enum):
    """Named predicates over the sample session."""

    NEVER = "never"
    CURRENT_WORD_MARKED = "current_word_marked"
    CURRENT_WORD_UNMARKED = "current_word_unmarked"
    REACHED_SECOND_WORD = "reached_second_word"
    REACHED_THIRD_WORD = "reached_third_word"


@dataclass(frozen=True)
class StateCondition:
    """Completed when the named predicate holds after the key was handled."""

    condition: Condition


ValidationRule = KeyPress | KeyPressAny | MenuSelection | StateCondition


# Highlight targets --------------------------------------------------------


@dataclass(frozen=True)
class MenuOption:
    """Highlight one main menu entry."""

    index: int


@dataclass(frozen=True)
class KeyHint:
    """Highlight one practice key hint, e.g. 'm' or 'Enter'."""

    label: str


HighlightTarget = MenuOption | KeyHint


@dataclass(frozen=True)
class TutorialStep:
    """One unit of guided instruction."""

    id: int
    instruction: str
    hint: str | None
    validation: ValidationRule
    highlight: HighlightTarget | None = None


ENTER = KeyEvent.of(KeyCode.ENTER)

TUTORIAL_STEPS: tuple[TutorialStep, ...] = (
    TutorialStep(
        id=0,
        instruction=(
            "Welcome to Vocabulator! This tutorial will teach you how to use the app. Press Enter to continue."
        ),
        hint="Press the Enter key to proceed.",
        validation=KeyPress(ENTER),
    ),
    TutorialStep(
        id=1,
        instruction="Use the Down arrow or 'j' key to move down in the menu. Try it now.",
        hint="Press Down arrow or 'j' to move the selection down.",
        validation=KeyPress(KeyEvent.of(KeyCode.DOWN)),
        highlight=MenuOption(1),
    ),
    TutorialStep(
        id=2,
        instruction="Use the Up arrow or 'k' key to move up. Try moving back up.",
        hint="Press Up arrow or 'k' to move the selection up.",
        validation=KeyPress(KeyEvent.of(KeyCode.UP)),
        highlight=MenuOption(0),
    ),
    TutorialStep(
        id=3,
        instruction="Press Enter to select 'Continue Learning' and start a practice session.",
        hint="Make sure 'Continue Learning' is highlighted, then press Enter.",
        validation=MenuSelection(0),
        highlight=MenuOption(0),
    ),
    TutorialStep(
        id=4,
        instruction="You see a vocabulary word. Try to recall its definition before revealing it.",
        hint="This message will auto-advance in 10 seconds, or press any key to continue.",
        # Left by timer or any key press; the router handles both.
        validation=StateCondition(Condition.NEVER),
    ),
    TutorialStep(
        id=5,
        instruction="Press 's' to show the definition.",
        hint="Press the 's' key to reveal the definition.",
        validation=KeyPress(KeyEvent.key("s")),
        highlight=KeyHint("s"),
    ),
    TutorialStep(
        id=6,
        instruction="Grade yourself honestly. Press 'y' if you knew it, or 'n' if you didn't.",
        hint="Press 'y' for correct or 'n' for incorrect.",
        validation=KeyPressAny((KeyEvent.key("y"), KeyEvent.key("n"))),
        highlight=KeyHint("y/n"),
    ),
    TutorialStep(
        id=7,
        instruction="Press 'm' to bookmark this word. Bookmarked words show a star (*).",
        hint="Press the 'm' key to toggle the bookmark.",
        validation=StateCondition(Condition.CURRENT_WORD_MARKED),
        highlight=KeyHint("m"),
    ),
    TutorialStep(
        id=8,
        instruction="Press 'm' again to remove the bookmark.",
        hint="Press the 'm' key to toggle the bookmark off.",
        validation=StateCondition(Condition.CURRENT_WORD_UNMARKED),
        highlight=KeyHint("m"),
    ),
    TutorialStep(
        id=9,
        instruction=(
            "Bookmarked words can be reviewed later! Use 'Review Marks' from the main menu to practice "
            "only your bookmarked words. Press Enter to continue."
        ),
        hint="Press Enter to continue learning about the app.",
        validation=KeyPress(ENTER),
    ),
    TutorialStep(
        id=10,
        instruction="Press Enter to move to the next word.",
        hint="Press the Enter key to advance to the next word.",
        validation=StateCondition(Condition.REACHED_SECOND_WORD),
        highlight=KeyHint("Enter"),
    ),
    TutorialStep(
        id=11,
        instruction="Practice with a few more words using 's', 'y'/'n', 'm', and Enter as you like.",
        hint="Use the practice controls freely. Advance to at least 2 more words to continue.",
        validation=StateCondition(Condition.REACHED_THIRD_WORD),
    ),
    TutorialStep(
        id=12,
        instruction="Press 'q' or Escape to return to the main menu.",
        hint="Press 'q' or Escape to exit the practice session.",
        validation=KeyPress(KeyEvent.key("q")),
        highlight=KeyHint("q"),
    ),
    TutorialStep(
        id=13,
        instruction=(
            "Great job! You've learned the basics. There's also a Test mode where you type the word "
            "from the definition. Your progress auto-saves. Press Enter to finish."
        ),
        hint="Press Enter to complete the tutorial.",
        validation=KeyPress(ENTER),
    ),
)

# Steps that show the sample practice screen and accept practice keys.
PRACTICE_STEP_IDS = frozenset({5, 6, 7, 8, 10, 11, 12})
# Steps that show the main menu preview and move its cursor.
MENU_STEP_IDS = frozenset({1, 2, 3})


# State --------------------------------------------------------------------


class TutorialPhase(Enum):
    """What the tutorial screen is currently showing."""

    RUNNING = "running"
    CONFIRMING_EXIT = "confirming_exit"
    SHOWING_COMPLETION = "showing_completion"


@dataclass
class TutorialState:
    """Progress of one tutorial run."""

    current_step: int = 0
    total_steps: int = len(TUTORIAL_STEPS)
    sample_session: Session | None = None
    completed_actions: list[str] = field(default_factory=list)
    phase: TutorialPhase = TutorialPhase.RUNNING
    step_entered_at: float | None = None
    exit_requested_at: float | None = None

    @property
    def exit_requested(self) -> bool:
        """Whether the exit-confirmation dialog is open."""
        return self.phase is TutorialPhase.CONFIRMING_EXIT

    @exit_requested.setter
    def exit_requested(self, value: bool) -> None:
        self.phase = TutorialPhase.CONFIRMING_EXIT if value else TutorialPhase.RUNNING

    @property
    def showing_completion(self) -> bool:
        """Whether the congratulations dialog is open."""
        return self.phase is TutorialPhase.SHOWING_COMPLETION

    @property
    def is_complete(self) -> bool:
        """Whether every step has been validated."""
        return self.current_step >= self.total_steps

    def request_exit(self, now: float) -> None:
        """Open the exit dialog; the step timer stops while it is open."""
        self.phase = TutorialPhase.CONFIRMING_EXIT
        self.exit_requested_at = now

    def cancel_exit(self, now: float) -> None:
        """Close the exit dialog and resume the step timer where it stopped."""
        if self.exit_requested_at is not None and self.step_entered_at is not None:
            self.step_entered_at += now - self.exit_requested_at
        self.exit_requested_at = None
        self.phase = TutorialPhase.RUNNING

    def enter_step(self, step: int, now: float) -> None:
        """Jump to `step` and restart its timer. Used only for the timed step's exit."""
        self.current_step = step
        self.step_entered_at = now


class ValidationResult:
    """Outcome of handling one key press against the current step."""

    __slots__ = ()


@dataclass(frozen=True)
class Valid(ValidationResult):
    """The step was completed and the tutorial moved to the next one."""


@dataclass(frozen=True)
class Invalid(ValidationResult):
    """The key did not complete the step; `hint` says what to do instead."""

    hint: str


@dataclass(frozen=True)
class Complete(ValidationResult):
    """Every step is done."""


# Construction -------------------------------------------------------------


def create_sample_session(words: tuple[tuple[str, str], ...] = SAMPLE_WORDS) -> Session:
    """Build an isolated practice session from the built-in sample words.

    Ids are -1, -2, ... and every word sits in the tutorial group, so none of
    them can collide with stored vocabulary.
    """
    sample = [
        Word(
            id=-(position + 1),
            word=text,
            definition=definition,
            group_id=TUTORIAL_GROUP_ID,
            marked=False,
            last_seen=None,
            times_seen=0,
            success_count=0,
        )
        for position, (text, definition) in enumerate(words)
    ]
    return Session(words=sample, index=0, session_type=SessionType.GROUP)


def init_tutorial(clock: Clock = time.monotonic) -> TutorialState:
    """Start a fresh tutorial run at step 0."""
    return TutorialState(
        current_step=0,
        total_steps=len(TUTORIAL_STEPS),
        sample_session=create_sample_session(),
        completed_actions=[],
        phase=TutorialPhase.RUNNING,
        step_entered_at=clock(),
    )


# Engine -------------------------------------------------------------------


def get_current_step(state: TutorialState) -> TutorialStep:
    """Return the current step, clamped to the last one once the tutorial is done."""
    index = min(state.current_step, len(TUTORIAL_STEPS) - 1)
    return TUTORIAL_STEPS[index]


# Alternate keys that satisfy a KeyPress rule: expected -> accepted stand-ins.
_KEY_ALTERNATES: dict[KeyEvent, tuple[KeyEvent, ...]] = {
    KeyEvent.of(KeyCode.DOWN): (KeyEvent.key("j"),),
    KeyEvent.of(KeyCode.UP): (KeyEvent.key("k"),),
    KeyEvent.key("q"): (KeyEvent.of(KeyCode.ESC),),
}


def _same_key(expected: KeyEvent, key: KeyEvent) -> bool:
    """Compare key identity, ignoring modifiers."""
    return expected.code is key.code and expected.char == key.char


def key_matches(expected: KeyEvent, key: KeyEvent) -> bool:
    """Return whether `key` is `expected` or one of its alternates."""
    if _same_key(expected, key):
        return True
    return any(_same_key(alternate, key) for alternate in _KEY_ALTERNATES.get(expected, ()))


def _current_word(state: TutorialState) -> Word | None:
    session = state.sample_session
    if session is None or not (0 <= session.index < len(session.words)):
        return None
    return session.current()


def evaluate_condition(condition: Condition, state: TutorialState) -> bool:
    """Evaluate a named predicate against the tutorial's sample session."""
    if condition is Condition.NEVER:
        return False
    if condition is Condition.CURRENT_WORD_MARKED:
        word = _current_word(state)
        return word is not None and word.marked
    if condition is Condition.CURRENT_WORD_UNMARKED:
        word = _current_word(state)
        return word is not None and not word.marked
    session = state.sample_session
    if session is None:
        return False
    if condition is Condition.REACHED_SECOND_WORD:
        return session.index >= 1
    if condition is Condition.REACHED_THIRD_WORD:
        return session.index >= 2
    raise ValueError(f"Unknown condition: {condition}")


def rule_satisfied(rule: ValidationRule, state: TutorialState, selected: int, key: KeyEvent) -> bool:
    """Return whether `key` (with the menu cursor at `selected`) satisfies `rule`."""
    if isinstance(rule, KeyPress):
        return key_matches(rule.expected, key)
    if isinstance(rule, KeyPressAny):
        return any(_same_key(accepted, key) for accepted in rule.accepted)
    if isinstance(rule, MenuSelection):
        return key.code is KeyCode.ENTER and selected == rule.index
    if isinstance(rule, StateCondition):
        return evaluate_condition(rule.condition, state)
    raise TypeError(f"Unsupported validation rule: {rule!r}")


def validate_and_advance(
    state: TutorialState,
    selected: int,
    key: KeyEvent,
    now: float | None = None,
) -> ValidationResult:
    """Check `key` against the current step and move forward one step when it passes.

    `selected` is the main menu cursor owned by the surrounding screen. A
    rejected key leaves the state untouched and returns the step's hint.
    """
    if state.current_step >= len(TUTORIAL_STEPS):
        return Complete()

    step = get_current_step(state)
    if not rule_satisfied(step.validation, state, selected, key):
        return Invalid(step.hint or GENERIC_HINT)

    state.current_step += 1
    state.step_entered_at = time.monotonic() if now is None else now
    if state.current_step >= len(TUTORIAL_STEPS):
        return Complete()
    return Valid()


def should_auto_advance(state: TutorialState, now: float | None = None) -> bool:
    """Return whether the timed step has been shown long enough to move on."""
    if state.current_step != AUTO_ADVANCE_STEP or state.step_entered_at is None:
        return False
    current = time.monotonic() if now is None else now
    return current - state.step_entered_at >= AUTO_ADVANCE_SECONDS


def seconds_until_auto_advance(state: TutorialState, now: float | None = None) -> int:
    """Whole seconds left on the timed step's countdown."""
    if state.step_entered_at is None:
        return int(AUTO_ADVANCE_SECONDS)
    current = time.monotonic() if now is None else now
    remaining = AUTO_ADVANCE_SECONDS - (current - state.step_entered_at)
    return max(0, math.ceil(remaining))


def is_practice_step(step: TutorialStep) -> bool:
    """Whether the step shows the sample practice screen."""
    return step.id in PRACTICE_STEP_IDS


def is_menu_step(step: TutorialStep) -> bool:
    """Whether the step shows the main menu preview."""
    return step.id in MENU_STEP_IDS
