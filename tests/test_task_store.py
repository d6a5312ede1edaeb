# tests/test_task_store.py

from __future__ import annotations

import json

from ocean_tasks.tasks.task_models import Task, TaskFilter
from ocean_tasks.tasks.task_store import (
    TaskStore,
    deserialize_tasks,
    filter_and_search,
    serialize_tasks,
)

from .fakes import ExplodingKeyValueStore, FakeClock, InMemoryKeyValueStore


def _titles(tasks) -> list[str]:
    return [t.title for t in tasks]


def test_add_trims_and_rejects_blank(store: TaskStore) -> None:
    assert store.add("   ") == ()
    assert store.add("") == ()

    tasks = store.add("  Buy milk  ")
    assert len(tasks) == 1
    task = tasks[0]
    assert task.title == "Buy milk"
    assert task.completed is False
    assert task.created_at == task.updated_at


def test_add_prepends_newest_first(store: TaskStore) -> None:
    store.add("A")
    tasks = store.add("B")
    assert _titles(tasks) == ["B", "A"]


def test_ids_are_unique_with_default_factory() -> None:
    store = TaskStore()
    for i in range(200):
        store.add(f"task {i}")
    ids = [t.id for t in store.tasks]
    assert len(set(ids)) == 200


def test_colliding_id_factory_is_retried(clock: FakeClock) -> None:
    ids = iter(["dup", "dup", "other"])
    store = TaskStore(clock=clock, id_factory=lambda: next(ids))
    store.add("first")
    store.add("second")
    assert sorted(t.id for t in store.tasks) == ["dup", "other"]


def test_ids_of_deleted_tasks_are_not_reissued(clock: FakeClock) -> None:
    ids = iter(["a", "a", "b"])
    store = TaskStore(clock=clock, id_factory=lambda: next(ids))
    (first,) = store.add("first")
    store.remove(first.id)

    (second,) = store.add("second")
    assert second.id == "b"


def test_loaded_ids_are_not_reissued(clock: FakeClock) -> None:
    loaded = (Task(id="a", title="old", completed=False, created_at=1, updated_at=1),)
    ids = iter(["a", "b"])
    store = TaskStore(loaded, clock=clock, id_factory=lambda: next(ids))
    store.remove("a")
    assert store.add("new")[0].id == "b"


def test_toggle_twice_restores_flag_and_never_rewinds_time(store: TaskStore) -> None:
    (task,) = store.add("Walk dog")

    store.toggle(task.id)
    after_first = store.get(task.id)
    assert after_first is not None and after_first.completed is True
    assert after_first.updated_at >= task.updated_at

    store.toggle(task.id)
    after_second = store.get(task.id)
    assert after_second is not None
    assert after_second.completed is False
    assert after_second.updated_at >= after_first.updated_at
    assert after_second.created_at == task.created_at


def test_updated_at_is_monotonic_when_clock_goes_back() -> None:
    clock = FakeClock(start=1_000, step=-100)
    store = TaskStore(clock=clock)
    (task,) = store.add("x")

    store.toggle(task.id)
    store.commit_edit(task.id, "y")
    final = store.get(task.id)
    assert final is not None
    assert final.updated_at >= task.updated_at


def test_commit_edit_sets_trimmed_title(store: TaskStore) -> None:
    (task,) = store.add("Old")
    store.commit_edit(task.id, "  New title ")
    edited = store.get(task.id)
    assert edited is not None
    assert edited.title == "New title"
    assert edited.updated_at >= task.updated_at


def test_commit_empty_title_deletes(store: TaskStore) -> None:
    store.add("keep")
    store.add("drop")
    drop = store.tasks[0]

    tasks = store.commit_edit(drop.id, "   ")
    assert _titles(tasks) == ["keep"]
    assert store.get(drop.id) is None


def test_remove_preserves_order_of_others(store: TaskStore) -> None:
    for t in ("A", "B", "C"):
        store.add(t)
    b = store.tasks[1]
    assert _titles(store.remove(b.id)) == ["C", "A"]


def test_stale_id_operations_are_noops(store: TaskStore) -> None:
    store.add("only")
    before = store.tasks

    assert store.toggle("missing") == before
    assert store.remove("missing") == before
    assert store.commit_edit("missing", "x") == before
    assert store.commit_edit("missing", "") == before


def test_clear_completed_keeps_active_tasks_unchanged(store: TaskStore) -> None:
    for t in ("A", "B", "C", "D"):
        store.add(t)
    store.toggle(store.tasks[0].id)  # D
    store.toggle(store.tasks[2].id)  # B
    active_before = [t for t in store.tasks if not t.completed]

    tasks = store.clear_completed()
    assert not any(t.completed for t in tasks)
    assert list(tasks) == active_before
    assert store.has_completed() is False


def test_remaining_and_has_completed(store: TaskStore) -> None:
    assert store.remaining_count() == 0
    assert store.has_completed() is False
    store.add("A")
    store.add("B")
    store.toggle(store.tasks[0].id)
    assert store.remaining_count() == 1
    assert store.has_completed() is True


# ---- filter / search ----


def _sample() -> tuple[Task, ...]:
    return (
        Task(id="1", title="Buy milk", completed=False, created_at=1, updated_at=1),
        Task(id="2", title="Pay bills", completed=True, created_at=2, updated_at=2),
    )


def test_filter_and_search_composition() -> None:
    tasks = _sample()
    assert _titles(filter_and_search(tasks, TaskFilter.ACTIVE, "milk")) == ["Buy milk"]
    assert list(filter_and_search(tasks, TaskFilter.COMPLETED, "milk")) == []
    assert _titles(filter_and_search(tasks, TaskFilter.ALL, "")) == ["Buy milk", "Pay bills"]
    assert _titles(filter_and_search(tasks, TaskFilter.COMPLETED, "")) == ["Pay bills"]


def test_search_is_trimmed_and_case_insensitive() -> None:
    tasks = _sample()
    assert _titles(filter_and_search(tasks, TaskFilter.ALL, "  MILK ")) == ["Buy milk"]
    assert _titles(filter_and_search(tasks, "all", "   ")) == ["Buy milk", "Pay bills"]


def test_view_is_restartable_and_does_not_mutate() -> None:
    tasks = _sample()
    view = filter_and_search(tasks, TaskFilter.ALL, "i")
    assert list(view) == list(view)
    assert len(view) == 2
    assert bool(filter_and_search(tasks, TaskFilter.ALL, "zzz")) is False
    assert tasks == _sample()


def test_unknown_filter_string_means_all() -> None:
    assert len(filter_and_search(_sample(), "bogus", "")) == 2


# ---- persistence ----


def test_serialize_round_trip(store: TaskStore) -> None:
    store.add("A")
    store.add("B")
    store.toggle(store.tasks[1].id)

    restored = deserialize_tasks(serialize_tasks(store.tasks))
    assert restored == store.tasks


def test_serialized_records_use_camel_case_keys(store: TaskStore) -> None:
    store.add("A")
    (record,) = json.loads(store.serialize())
    assert set(record) == {"id", "title", "completed", "createdAt", "updatedAt"}


def test_deserialize_malformed_falls_back_to_empty() -> None:
    assert deserialize_tasks(None) == ()
    assert deserialize_tasks(b"") == ()
    assert deserialize_tasks(b"{not json") == ()
    assert deserialize_tasks(b"\xff\xfe") == ()
    assert deserialize_tasks(b'{"id": "x"}') == ()
    assert deserialize_tasks(b'[{"id": "x", "title": "t"}]') == ()
    assert deserialize_tasks(b'[{"id": "x", "title": " ", "completed": false, "createdAt": 1, "updatedAt": 1}]') == ()
    assert deserialize_tasks(b'[{"id": "x", "title": "t", "completed": "no", "createdAt": 1, "updatedAt": 1}]') == ()


def test_deserialize_out_of_range_and_deeply_nested_input_falls_back_to_empty() -> None:
    assert deserialize_tasks(b'[{"id": "a", "title": "t", "completed": false, "createdAt": Infinity, "updatedAt": 1}]') == ()
    assert deserialize_tasks(b'[{"id": "a", "title": "t", "completed": false, "createdAt": 1, "updatedAt": NaN}]') == ()
    assert deserialize_tasks(b'[{"id": "a", "title": "t", "completed": false, "createdAt": 1e400, "updatedAt": 1}]') == ()
    assert deserialize_tasks(b"[" * 200_000 + b"]" * 200_000) == ()


def test_load_survives_non_finite_timestamps() -> None:
    raw = b'[{"id": "a", "title": "t", "completed": false, "createdAt": Infinity, "updatedAt": 1}]'
    assert TaskStore.load(InMemoryKeyValueStore({"tasks": raw}), "tasks").tasks == ()


def test_deserialize_drops_duplicate_ids() -> None:
    raw = json.dumps(
        [
            {"id": "a", "title": "first", "completed": False, "createdAt": 1, "updatedAt": 1},
            {"id": "a", "title": "again", "completed": True, "createdAt": 2, "updatedAt": 2},
        ]
    ).encode()
    tasks = deserialize_tasks(raw)
    assert _titles(tasks) == ["first"]


def test_load_from_storage(clock: FakeClock) -> None:
    storage = InMemoryKeyValueStore()
    saved = TaskStore(clock=clock)
    saved.add("persisted")
    storage.set("tasks", saved.serialize())

    loaded = TaskStore.load(storage, "tasks")
    assert loaded.tasks == saved.tasks


def test_load_falls_back_to_empty() -> None:
    assert TaskStore.load(InMemoryKeyValueStore(), "tasks").tasks == ()
    assert TaskStore.load(InMemoryKeyValueStore({"tasks": b"garbage"}), "tasks").tasks == ()
    assert TaskStore.load(ExplodingKeyValueStore(), "tasks").tasks == ()
