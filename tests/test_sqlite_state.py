from __future__ import annotations

from hashbridge.adapters.sqlite_state import SQLiteStateStore


def test_cursor_roundtrip(tmp_path) -> None:
    store = SQLiteStateStore(str(tmp_path / "state.db"), "telegram_bot:1")
    store.init_db()

    assert store.get_cursor() is None
    store.set_cursor(10)
    assert store.get_cursor() == 10


def test_cursor_is_not_lowered(tmp_path) -> None:
    store = SQLiteStateStore(str(tmp_path / "state.db"), "telegram_bot:1")
    store.init_db()

    store.set_cursor(50)
    store.set_cursor(20)

    assert store.get_cursor() == 50


def test_cursor_is_per_source(tmp_path) -> None:
    db_path = str(tmp_path / "state.db")
    first = SQLiteStateStore(db_path, "telegram_bot:1")
    second = SQLiteStateStore(db_path, "telegram_bot:2")
    first.init_db()

    first.set_cursor(7)

    assert second.get_cursor() is None
