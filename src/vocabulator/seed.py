"""Parse plain-text word lists and load them into the store."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .progress import ProgressStore

logger = logging.getLogger(__name__)

_NUMBERED_SENSE = re.compile(r"(\d)\.")


@dataclass(frozen=True)
class SeedEntry:
    """One parsed word list entry."""

    word: str
    definition: str
    group_id: int


def parse_word_list(text: str) -> list[SeedEntry]:
    """Parse word list text.

    Format:
    - `Group N` starts group N for the following words.
    - `word definition...` starts a word; inline `1. foo 2. bar` senses are split onto lines.
    - lines beginning with `N.` or `(` continue the previous word's definition.
    - blank lines are ignored.
    """
    entries: list[SeedEntry] = []
    group_id = 0
    current_word: str | None = None
    definition_lines: list[str] = []

    def flush() -> None:
        nonlocal current_word
        if current_word is not None:
            entries.append(SeedEntry(current_word, "\n".join(definition_lines).strip(), group_id))
        current_word = None
        definition_lines.clear()

    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith("Group"):
            flush()
            parts = line.split()
            try:
                group_id = int(parts[-1])
            except ValueError as exc:
                raise ValueError(f"Invalid group line {line_no}: {line!r}") from exc
            continue

        if line[0].isdigit() and "." in line:
            definition_lines.append(line.split(".", 1)[1].strip())
            continue

        if line.startswith("("):
            definition_lines.append(line)
            continue

        flush()
        word, _, rest = line.partition(" ")
        current_word = word
        inline = _split_inline_senses(rest.strip())
        if inline:
            definition_lines.extend(inline)

    flush()
    return entries


def _split_inline_senses(text: str) -> list[str]:
    """Split `1. foo 2. bar` into ['foo', 'bar']; plain text stays one line."""
    pieces = _NUMBERED_SENSE.split(text)
    # re.split with one group alternates text and captured digits.
    senses = [piece.strip() for piece in pieces[::2]]
    return [sense for sense in senses if sense]


def load_word_list(path: Path | str) -> list[SeedEntry]:
    """Read and parse a word list file."""
    return parse_word_list(Path(path).read_text(encoding="utf-8-sig"))


def seed_store(store: ProgressStore, path: Path | str) -> int:
    """Insert all entries from a word list file; return how many were new."""
    entries = load_word_list(path)
    inserted = sum(1 for entry in entries if store.add_word(entry.word, entry.definition, entry.group_id))
    logger.info("Seeded %d of %d words from %s", inserted, len(entries), path)
    return inserted
