"""Key events and raw terminal key reading."""

from __future__ import annotations

import codecs
import os
import select
import sys
import termios
import tty
from dataclasses import dataclass
from enum import Enum, Flag, auto
from typing import TextIO


class KeyCode(Enum):
    """Logical key identity, independent of terminal encoding."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    ESC = "esc"
    BACKSPACE = "backspace"
    TAB = "tab"
    CHAR = "char"


class KeyModifiers(Flag):
    """Modifier keys held with a key press."""

    NONE = 0
    SHIFT = auto()
    CONTROL = auto()
    ALT = auto()


@dataclass(frozen=True)
class KeyEvent:
    """One key press: a key code, the character for CHAR keys, and modifiers."""

    code: KeyCode
    char: str | None = None
    modifiers: KeyModifiers = KeyModifiers.NONE

    @classmethod
    def of(cls, code: KeyCode, modifiers: KeyModifiers = KeyModifiers.NONE) -> KeyEvent:
        """Build an event for a non-character key."""
        return cls(code=code, char=None, modifiers=modifiers)

    @classmethod
    def key(cls, char: str, modifiers: KeyModifiers = KeyModifiers.NONE) -> KeyEvent:
        """Build an event for a character key."""
        if len(char) != 1:
            raise ValueError(f"Character key must be one character, got {char!r}.")
        return cls(code=KeyCode.CHAR, char=char, modifiers=modifiers)

    def is_char(self, *chars: str) -> bool:
        """Return whether this is a character key matching any of `chars`."""
        return self.code is KeyCode.CHAR and self.char in chars

    @property
    def is_interrupt(self) -> bool:
        """Ctrl-C."""
        return self.is_char("c") and KeyModifiers.CONTROL in self.modifiers

    def label(self) -> str:
        """Short human-readable name, e.g. 'Enter' or 'j'."""
        if self.code is KeyCode.CHAR:
            prefix = "Ctrl-" if KeyModifiers.CONTROL in self.modifiers else ""
            return f"{prefix}{self.char}"
        return self.code.value.capitalize()


_ESCAPE_SEQUENCES = {
    "\x1b[A": KeyCode.UP,
    "\x1b[B": KeyCode.DOWN,
    "\x1b[C": KeyCode.RIGHT,
    "\x1b[D": KeyCode.LEFT,
    "\x1bOA": KeyCode.UP,
    "\x1bOB": KeyCode.DOWN,
    "\x1bOC": KeyCode.RIGHT,
    "\x1bOD": KeyCode.LEFT,
}


def decode_key(data: str) -> KeyEvent | None:
    """Map raw terminal input to a key event, or None when unrecognized."""
    if not data:
        return None
    if data in _ESCAPE_SEQUENCES:
        return KeyEvent.of(_ESCAPE_SEQUENCES[data])
    if data == "\x1b":
        return KeyEvent.of(KeyCode.ESC)
    if data.startswith("\x1b"):
        if len(data) == 2 and data[1].isprintable():
            return KeyEvent.key(data[1], KeyModifiers.ALT)
        return None
    if len(data) != 1:
        return None
    if data in ("\r", "\n"):
        return KeyEvent.of(KeyCode.ENTER)
    if data in ("\x7f", "\x08"):
        return KeyEvent.of(KeyCode.BACKSPACE)
    if data == "\t":
        return KeyEvent.of(KeyCode.TAB)
    code_point = ord(data)
    if 1 <= code_point <= 26:
        return KeyEvent.key(chr(code_point + 96), KeyModifiers.CONTROL)
    if not data.isprintable():
        return None
    modifiers = KeyModifiers.SHIFT if data.isupper() else KeyModifiers.NONE
    return KeyEvent.key(data, modifiers)


class TerminalKeyReader:
    """Read single key presses from a POSIX terminal with a bounded wait."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self._fd = self._stream.fileno()
        self._saved: list | None = None

    def __enter__(self) -> TerminalKeyReader:
        self._saved = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._saved is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def _ready(self, timeout: float) -> bool:
        readable, _, _ = select.select([self._fd], [], [], timeout)
        return bool(readable)

    def read_key(self, timeout: float) -> KeyEvent | None:
        """Wait at most `timeout` seconds for one key press."""
        if not self._ready(timeout):
            return None
        data = self._read_char()
        if data == "\x1b":
            # Arrow keys arrive as a burst; a lone ESC has nothing queued behind it.
            while len(data) < 3 and self._ready(0.01):
                data += self._read_char()
        return decode_key(data)

    def _read_char(self) -> str:
        """Read one UTF-8 character; continuation bytes are read as they arrive."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="ignore")
        text = decoder.decode(os.read(self._fd, 1))
        while not text and decoder.getstate()[0] and self._ready(0.01):
            text = decoder.decode(os.read(self._fd, 1))
        return text
