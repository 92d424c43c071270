import sqlite3
from pathlib import Path

import pytest

from vocabulator.models import Screen
from vocabulator.progress import SCHEMA_VERSION, ProgressStore


def test_tutorial_flag_defaults_to_false() -> None:
    store = ProgressStore(":memory:")
    assert store.get_tutorial_completed() is False


def test_tutorial_flag_round_trip() -> None:
    store = ProgressStore(":memory:")
    store.set_tutorial_completed(True)
    assert store.get_tutorial_completed() is True
    store.set_tutorial_completed(False)
    assert store.get_tutorial_completed() is False
    store.set_tutorial_completed(True)
    assert store.get_tutorial_completed() is True


def test_tutorial_flag_survives_reopen(tmp_path: Path) -> None:
    db_path = tmp_path / "vocab.db"
    store = ProgressStore(db_path)
    store.set_tutorial_completed(True)
    store.close()

    reopened = ProgressStore(db_path)
    assert reopened.get_tutorial_completed() is True
    reopened.close()


def test_migration_sets_user_version_and_schema_history() -> None:
    store = ProgressStore(":memory:")
    version = int(store._conn.execute("PRAGMA user_version").fetchone()[0])  # noqa: SLF001
    assert version == SCHEMA_VERSION
    rows = store._conn.execute("SELECT version FROM schema_migrations ORDER BY version").fetchall()  # noqa: SLF001
    assert [int(row["version"]) for row in rows] == list(range(1, SCHEMA_VERSION + 1))


def test_rejects_newer_schema(tmp_path: Path) -> None:
    db_path = tmp_path / "future.db"
    conn = sqlite3.connect(db_path)
    try:
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
        conn.commit()
    finally:
        conn.close()

    with pytest.raises(RuntimeError, match="newer than supported"):
        ProgressStore(db_path)


def test_upgrades_v1_database_with_settings_table(tmp_path: Path) -> None:
    db_path = tmp_path / "v1.db"
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("""
            CREATE TABLE words (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                word TEXT NOT NULL,
                definition TEXT NOT NULL,
                group_id INTEGER NOT NULL,
                marked INTEGER NOT NULL DEFAULT 0,
                last_seen INTEGER,
                times_seen INTEGER NOT NULL DEFAULT 0,
                success_count INTEGER NOT NULL DEFAULT 0,
                UNIQUE (word, group_id)
            )
            """)
        conn.execute("INSERT INTO words (word, definition, group_id) VALUES ('lucid', 'clear', 1)")
        conn.execute("PRAGMA user_version = 1")
        conn.commit()
    finally:
        conn.close()

    store = ProgressStore(db_path)
    assert store.count_words() == 1
    assert store.get_tutorial_completed() is False
    store.set_tutorial_completed(True)
    assert store.get_tutorial_completed() is True
    store.close()


def test_add_word_ignores_duplicates_within_group() -> None:
    store = ProgressStore(":memory:")
    assert store.add_word("lucid", "clear", 1) is True
    assert store.add_word("lucid", "clear again", 1) is False
    assert store.add_word("lucid", "clear", 2) is True
    assert store.count_words() == 2


def test_fetch_words_by_group_keeps_insertion_order() -> None:
    store = ProgressStore(":memory:")
    store.add_word("zeal", "z", 1)
    store.add_word("apt", "a", 1)
    store.add_word("other", "o", 2)
    words = store.fetch_words_by_group(1)
    assert [word.word for word in words] == ["zeal", "apt"]
    assert all(word.group_id == 1 for word in words)
    assert words[0].last_seen is None
    assert words[0].times_seen == 0


def test_marked_words_and_final_group() -> None:
    store = ProgressStore(":memory:")
    assert store.fetch_final_group() is None
    store.add_word("a", "a", 1)
    store.add_word("b", "b", 3)
    word = store.fetch_words_by_group(3)[0]
    store.set_marked(word.id, True)

    marked = store.fetch_marked_words()
    assert [item.word for item in marked] == ["b"]
    assert marked[0].marked is True
    assert store.fetch_final_group() == 3


def test_update_word_stats_and_weak_words() -> None:
    store = ProgressStore(":memory:")
    store.add_word("strong", "s", 1)
    store.add_word("weak", "w", 1)
    store.add_word("unseen", "u", 1)
    strong, weak, _ = store.fetch_words_by_group(1)

    strong.times_seen, strong.success_count, strong.last_seen = 4, 4, 100
    weak.times_seen, weak.success_count, weak.last_seen = 4, 1, 200
    store.update_word_stats(strong)
    store.update_word_stats(weak)

    reloaded = store.fetch_words_by_group(1)[1]
    assert (reloaded.times_seen, reloaded.success_count, reloaded.last_seen) == (4, 1, 200)
    assert [word.word for word in store.fetch_weak_words()] == ["weak"]


def test_progress_defaults_and_round_trip() -> None:
    store = ProgressStore(":memory:")
    assert store.fetch_progress() == (Screen.PRACTICE, 1, 0)
    store.save_progress(Screen.TEST, 2, 5)
    assert store.fetch_progress() == (Screen.TEST, 2, 5)
    store.save_progress(Screen.PRACTICE, 3, 0)
    assert store.fetch_progress() == (Screen.PRACTICE, 3, 0)


def test_path_database_creation(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "vocab.db"
    store = ProgressStore(db_path)
    store.add_word("lucid", "clear", 1)
    assert db_path.exists()
    store.close()
