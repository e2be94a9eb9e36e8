import pytest
from datetime import datetime
from questengine.progression.progress import QuestProgress
from questengine.progression.store import ProgressStore

def record(quest_id):
    return QuestProgress(quest_id=quest_id, start_time=datetime(2024, 1, 1))

def test_add_and_bound():
    store = ProgressStore(max_size=2)

    assert store.add(record("a"))
    assert not store.add(record("a"))
    assert store.add(record("b"))
    assert store.is_full
    assert store.free_slots == 0
    assert not store.add(record("c"))
    assert store.ids() == ["a", "b"]

def test_remove():
    store = ProgressStore()
    store.add(record("a"))

    assert store.remove("a").quest_id == "a"
    assert store.remove("a") is None
    assert "a" not in store

def test_view_is_read_only():
    store = ProgressStore()
    store.add(record("a"))
    view = store.view()

    with pytest.raises(TypeError):
        view["b"] = record("b")
    assert list(view) == ["a"]

def test_replace_all_reports_overflow():
    store = ProgressStore(max_size=2)
    store.add(record("old"))

    overflow = store.replace_all([record("a"), record("b"), record("c"), record("a")])

    assert store.ids() == ["a", "b"]
    assert overflow == ["c", "a"]

def test_zero_bound_store_is_always_full():
    store = ProgressStore(max_size=0)
    assert store.is_full
    assert not store.add(record("a"))
    assert len(store) == 0
