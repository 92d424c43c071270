"""CLI entrypoint and terminal event loop for the vocabulary trainer."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Callable
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Protocol

from . import __version__
from .app import App, dispatch, initial_screen, tick
from .keys import KeyEvent, TerminalKeyReader
from .render import render
from .service import VocabService

PrintFn = Callable[[str], None]
DrawFn = Callable[[list[str]], None]

DATA_DIR = Path(".vocabulator")
DEFAULT_DB_PATH = DATA_DIR / "vocab.db"
DEFAULT_LOG_PATH = DATA_DIR / "vocabulator.log"
DB_ENV_VAR = "VOCABULATOR_DB"
POLL_TIMEOUT = 0.1
CLEAR_SCREEN = "\x1b[2J\x1b[H"

logger = logging.getLogger(__name__)


class KeyReader(Protocol):
    """Source of key presses with a bounded wait."""

    def read_key(self, timeout: float) -> KeyEvent | None: ...


ReaderFactory = Callable[[], AbstractContextManager[KeyReader]]


def _service(db_path: Path | str) -> VocabService:
    """Create app service for the given database path."""
    return VocabService(db_path=db_path)


def _resolve_db_path(cli_value: str | None) -> Path | str:
    """Pick the database path: --db, then the environment, then the default."""
    if cli_value:
        return cli_value if cli_value == ":memory:" else Path(cli_value)
    env_value = os.environ.get(DB_ENV_VAR, "").strip()
    if env_value:
        return Path(env_value)
    return DEFAULT_DB_PATH


def _configure_logging(log_file: str | None, level: str) -> None:
    """Send log records to a file; the terminal belongs to the UI."""
    path = Path(log_file) if log_file else DEFAULT_LOG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(path),
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vocabulator", description="Terminal vocabulary trainer")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--db", help=f"database path (default: ${DB_ENV_VAR} or {DEFAULT_DB_PATH})")
    parser.add_argument("--log-file", help=f"log file path (default: {DEFAULT_LOG_PATH})")
    parser.add_argument("--log-level", default="WARNING", help="logging level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("play", help="run the interactive trainer (default)")
    seed = subparsers.add_parser("seed", help="import words from a word list file")
    seed.add_argument("file", help="path to the word list, e.g. data/vocab.txt")
    subparsers.add_parser("reset-tutorial", help="offer the tutorial again on next start")
    return parser


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    args = _build_parser().parse_args(argv)
    _configure_logging(args.log_file, args.log_level)
    db_path = _resolve_db_path(args.db)

    if args.command == "seed":
        return seed_command(db_path, args.file)
    if args.command == "reset-tutorial":
        return reset_tutorial_command(db_path)
    return play_shell(db_path)


def seed_command(db_path: Path | str, file_path: str, print_fn: PrintFn = print) -> int:
    """Import a word list into the database."""
    service = _service(db_path)
    try:
        try:
            inserted = service.seed_file(file_path)
        except (OSError, ValueError) as exc:
            print_fn(f"Seeding failed: {exc}")
            return 1
        print_fn(f"Database seeded successfully ({inserted} new words).")
        return 0
    finally:
        service.close()


def reset_tutorial_command(db_path: Path | str, print_fn: PrintFn = print) -> int:
    """Clear the tutorial completion flag."""
    service = _service(db_path)
    try:
        service.reset_tutorial()
        print_fn("Tutorial will be offered on next start.")
        return 0
    finally:
        service.close()


def _terminal_draw(lines: list[str]) -> None:
    sys.stdout.write(CLEAR_SCREEN + "\n".join(lines) + "\n")
    sys.stdout.flush()


def play_shell(
    db_path: Path | str,
    reader_factory: ReaderFactory = TerminalKeyReader,
    draw: DrawFn = _terminal_draw,
) -> int:
    """Run the interactive trainer until the user quits."""
    service = _service(db_path)
    try:
        app = App(service=service, current_screen=initial_screen(service))
        with reader_factory() as reader:
            event_loop(app, reader, draw)
    finally:
        service.close()
    return 0


def event_loop(app: App, reader: KeyReader, draw: DrawFn, poll_timeout: float = POLL_TIMEOUT) -> None:
    """Draw, run timers, wait briefly for a key, dispatch it; repeat until quit."""
    last_frame: list[str] | None = None
    while not app.should_quit:
        frame = render(app)
        if frame != last_frame:
            draw(frame)
            last_frame = frame

        if tick(app):
            continue

        key = reader.read_key(poll_timeout)
        if key is None:
            continue
        if key.is_interrupt:
            logger.info("Interrupted by Ctrl-C")
            app.should_quit = True
            break
        dispatch(app, key)


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
