from __future__ import annotations

import shutil
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from vocabulator.app import App  # noqa: E402
from vocabulator.models import Screen  # noqa: E402
from vocabulator.service import VocabService  # noqa: E402


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _tmp_path_fixture() -> Iterator[Path]:
    """Provide per-test temporary directory path inside the workspace.

    Overrides pytest's builtin ``tmp_path`` so database and word list files
    created by tests stay under ``.tmp_pytest/`` in the project directory.
    """
    base = ROOT / ".tmp_pytest"
    base.mkdir(parents=True, exist_ok=True)
    path = base / str(uuid4())
    path.mkdir(parents=True, exist_ok=False)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        try:
            next(base.iterdir())
        except StopIteration:
            base.rmdir()
        except FileNotFoundError:
            pass


tmp_path = pytest.fixture(name="tmp_path")(_tmp_path_fixture)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service() -> Iterator[VocabService]:
    svc = VocabService(":memory:")
    try:
        yield svc
    finally:
        svc.close()


@pytest.fixture
def app(service: VocabService, clock: FakeClock) -> App:
    return App(service=service, current_screen=Screen.MENU, clock=clock)


SeedWords = Callable[..., None]


@pytest.fixture
def seed_words(service: VocabService) -> SeedWords:
    """Store words in a group; each gets the definition 'meaning of <word>'."""

    def _seed(group_id: int, *words: str) -> None:
        for word in words:
            service.progress.add_word(word, f"meaning of {word}", group_id)

    return _seed
