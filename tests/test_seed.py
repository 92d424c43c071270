from pathlib import Path

import pytest

from vocabulator.progress import ProgressStore
from vocabulator.seed import SeedEntry, load_word_list, parse_word_list, seed_store


def test_parse_groups_and_single_line_definitions() -> None:
    text = "Group 1\nlucid clear and easy to understand\n\nGroup 2\nterse brief\n"
    assert parse_word_list(text) == [
        SeedEntry("lucid", "clear and easy to understand", 1),
        SeedEntry("terse", "brief", 2),
    ]


def test_parse_inline_numbered_senses() -> None:
    entries = parse_word_list("Group 3\nplastic 1. easily shaped 2. artificial\n")
    assert entries == [SeedEntry("plastic", "easily shaped\nartificial", 3)]


def test_parse_continuation_lines() -> None:
    text = "Group 1\nbank\n1. edge of a river\n2. place that keeps money\n(informal) a store of anything\nterse brief\n"
    entries = parse_word_list(text)
    assert entries[0] == SeedEntry(
        "bank",
        "edge of a river\nplace that keeps money\n(informal) a store of anything",
        1,
    )
    assert entries[1] == SeedEntry("terse", "brief", 1)


def test_parse_rejects_bad_group_number() -> None:
    with pytest.raises(ValueError, match="Invalid group line 2"):
        parse_word_list("lucid clear\nGroup x\n")


def test_load_word_list_strips_bom(tmp_path: Path) -> None:
    path = tmp_path / "vocab.txt"
    path.write_text("\ufeffGroup 1\nlucid clear\n", encoding="utf-8")
    assert load_word_list(path) == [SeedEntry("lucid", "clear", 1)]


def test_seed_store_counts_only_new_words(tmp_path: Path) -> None:
    path = tmp_path / "vocab.txt"
    path.write_text("Group 1\nlucid clear\nlucid clear again\nterse brief\n", encoding="utf-8")
    store = ProgressStore(":memory:")
    assert seed_store(store, path) == 2
    assert [word.definition for word in store.fetch_words_by_group(1)] == ["clear", "brief"]
