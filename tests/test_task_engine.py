# tests/test_task_engine.py

from __future__ import annotations

import pytest

from taskdeck.analytics.aggregator import completion_split
from taskdeck.core.events import ChangeKind
from taskdeck.errors import ConfirmationError, NotFound, PersistenceError, ValidationError
from taskdeck.storage.kv_store import TASKS_KEY
from taskdeck.tasks.daily_engine import DailyChecklist
from taskdeck.tasks.models import Priority, TaskFilter
from taskdeck.tasks.task_engine import TaskEngine


def test_add_write_report_then_toggle(tasks: TaskEngine, clock) -> None:
    task = tasks.add("Write report", priority="high")

    assert len(tasks) == 1
    assert task.completed is False
    assert task.completed_at is None
    assert task.priority is Priority.HIGH
    assert task.created_at == clock.now

    done = tasks.toggle_complete(task.id)
    assert done is not None
    assert done.completed is True
    assert done.completed_at == clock.now
    assert completion_split(tasks.items()) == (1, 0)


def test_add_defaults_and_most_recent_first(tasks: TaskEngine) -> None:
    first = tasks.add("First")
    second = tasks.add("  Second  ")

    assert [t.id for t in tasks.items()] == [second.id, first.id]
    assert second.title == "Second"
    assert first.description == ""
    assert first.due_date == ""
    assert first.priority is Priority.MEDIUM
    assert first.id != second.id


def test_blank_title_is_rejected_without_mutation(tasks: TaskEngine, mem_store) -> None:
    with pytest.raises(ValidationError):
        tasks.add("   ")

    assert tasks.items() == []
    assert mem_store.saves == 0


def test_invalid_priority_and_due_date_are_rejected(tasks: TaskEngine) -> None:
    with pytest.raises(ValidationError):
        tasks.add("x", priority="urgent")
    with pytest.raises(ValidationError):
        tasks.add("x", due_date="19/10/2026")
    assert len(tasks) == 0


def test_toggle_twice_restores_original(tasks: TaskEngine, clock) -> None:
    original = tasks.add("Loop")

    clock.advance(hours=1)
    tasks.toggle_complete(original.id)
    clock.advance(hours=1)
    back = tasks.toggle_complete(original.id)

    assert back == original
    assert (back.completed, back.completed_at) == (False, None)


def test_filters_partition_the_collection(tasks: TaskEngine) -> None:
    ids = [tasks.add(f"t{i}").id for i in range(5)]
    tasks.toggle_complete(ids[1])
    tasks.toggle_complete(ids[3])

    active = {t.id for t in tasks.filtered_view(TaskFilter.ACTIVE)}
    completed = {t.id for t in tasks.filtered_view("completed")}
    everything = {t.id for t in tasks.filtered_view("all")}

    assert active | completed == everything
    assert not active & completed
    assert completed == {ids[1], ids[3]}
    # stored order is kept
    assert [t.id for t in tasks.filtered_view("active")] == [ids[4], ids[2], ids[0]]


def test_filtered_view_is_a_fresh_list(tasks: TaskEngine) -> None:
    tasks.add("a")
    tasks.add("b")

    view = tasks.filtered_view()
    view.clear()

    assert len(tasks) == 2
    assert tasks.filtered_view() is not tasks.filtered_view()


def test_unknown_filter_is_rejected(tasks: TaskEngine) -> None:
    with pytest.raises(ValidationError):
        tasks.filtered_view("someday")


def test_edit_overwrites_fields_but_not_completion(tasks: TaskEngine, clock) -> None:
    task = tasks.add("Draft", description="old", due_date="2026-10-30", priority="low")
    done = tasks.toggle_complete(task.id)

    clock.advance(days=1)
    edited = tasks.edit(task.id, title="Final", priority="high")

    assert edited is not None
    assert edited.title == "Final"
    assert edited.description == ""
    assert edited.due_date == ""
    assert edited.priority is Priority.HIGH
    assert edited.completed is True
    assert edited.completed_at == done.completed_at
    assert edited.created_at == task.created_at


def test_edit_unknown_id_is_noop(tasks: TaskEngine, mem_store) -> None:
    assert tasks.edit("missing", title="x") is None
    assert mem_store.saves == 0


def test_edit_blank_title_allowed_unless_strict(mem_store, clock) -> None:
    lenient = TaskEngine(mem_store, clock=clock)
    task = lenient.add("Keep me")
    assert lenient.edit(task.id, title="  ").title == ""

    strict = TaskEngine(mem_store, clock=clock, strict_edit_title=True)
    strict.load()
    with pytest.raises(ValidationError):
        strict.edit(task.id, title="")


def test_delete_goes_through_confirmation(tasks: TaskEngine) -> None:
    keep = tasks.add("keep")
    drop = tasks.add("drop")

    token = tasks.request_delete(drop.id)
    assert "drop" in token.prompt
    assert len(tasks) == 2

    assert tasks.confirm_delete(token) is True
    assert [t.id for t in tasks.items()] == [keep.id]

    with pytest.raises(ConfirmationError):
        tasks.confirm_delete(token)


def test_cancelled_delete_keeps_task(tasks: TaskEngine) -> None:
    task = tasks.add("stay")
    token = tasks.request_delete(task.id)

    assert tasks.cancel_delete(token) is True
    assert tasks.get(task.id) == task
    with pytest.raises(ConfirmationError):
        tasks.confirm_delete(token)


def test_request_delete_unknown_id(tasks: TaskEngine) -> None:
    with pytest.raises(NotFound):
        tasks.request_delete("nope")
    assert tasks.delete("nope") is False


def test_token_from_another_engine_is_rejected(tasks: TaskEngine, daily: DailyChecklist) -> None:
    tasks.add("task")
    item = daily.add("daily")
    foreign = daily.request_delete(item.id)

    with pytest.raises(ConfirmationError):
        tasks.confirm_delete(foreign)
    assert len(daily) == 1


def test_persistence_failure_leaves_state_unchanged(tasks: TaskEngine, mem_store) -> None:
    task = tasks.add("safe")
    mem_store.fail_writes = True

    with pytest.raises(PersistenceError):
        tasks.add("lost")
    with pytest.raises(PersistenceError):
        tasks.toggle_complete(task.id)
    with pytest.raises(PersistenceError):
        tasks.edit(task.id, title="renamed", priority="high")
    with pytest.raises(PersistenceError):
        tasks.delete(task.id)

    assert tasks.items() == [task]


def test_mutations_emit_change_events(tasks: TaskEngine) -> None:
    seen = []
    tasks.notifier.subscribe(seen.append)

    task = tasks.add("observed")
    tasks.edit(task.id, title="observed!")
    tasks.toggle_complete(task.id)
    tasks.delete(task.id)
    tasks.toggle_complete(task.id)  # missing: no event

    assert [e.kind for e in seen] == [
        ChangeKind.ADDED,
        ChangeKind.EDITED,
        ChangeKind.TOGGLED,
        ChangeKind.DELETED,
    ]
    assert {e.item_id for e in seen} == {task.id}
    assert {e.source for e in seen} == {"tasks"}


def test_failing_listener_does_not_break_mutation(tasks: TaskEngine) -> None:
    def boom(_event) -> None:
        raise RuntimeError("listener bug")

    tasks.notifier.subscribe(boom)
    task = tasks.add("still saved")

    assert tasks.get(task.id) == task


def test_load_skips_malformed_and_repairs_completion(mem_store, clock) -> None:
    mem_store.data[TASKS_KEY] = [
        {"id": "ok", "title": "Fine", "createdAt": "2026-10-18T08:00:00+02:00", "completed": False,
         "completedAt": "2026-10-18T09:00:00+02:00"},
        {"id": "done", "title": "Done", "createdAt": "2026-10-18T08:00:00+02:00", "completed": True,
         "completedAt": None, "priority": "weird"},
        {"title": "no id", "createdAt": "2026-10-18T08:00:00+02:00"},
        {"id": "ok", "title": "dupe", "createdAt": "2026-10-18T08:00:00+02:00"},
    ]
    engine = TaskEngine(mem_store, clock=clock)

    assert engine.load() == 2
    ok = engine.get("ok")
    done = engine.get("done")
    assert ok.completed_at is None
    assert done.completed_at == done.created_at
    assert done.priority is Priority.MEDIUM


def test_failed_confirm_delete_keeps_token(tasks: TaskEngine, mem_store) -> None:
    task = tasks.add("stubborn")
    token = tasks.request_delete(task.id)
    mem_store.fail_writes = True

    with pytest.raises(PersistenceError):
        tasks.confirm_delete(token)
    assert tasks.items() == [task]

    mem_store.fail_writes = False
    assert tasks.confirm_delete(token) is True
    assert len(tasks) == 0
    with pytest.raises(ConfirmationError):
        tasks.confirm_delete(token)


def test_load_treats_non_bool_completed_as_open(mem_store, clock) -> None:
    mem_store.data[TASKS_KEY] = [
        {"id": "s", "title": "String flag", "createdAt": "2026-10-18T08:00:00+02:00",
         "completed": "false", "completedAt": "2026-10-18T09:00:00+02:00"},
        {"id": "n", "title": "Numeric flag", "createdAt": "2026-10-18T08:00:00+02:00", "completed": 1},
    ]
    engine = TaskEngine(mem_store, clock=clock)

    assert engine.load() == 2
    assert engine.get("s").completed is False
    assert engine.get("s").completed_at is None
    assert engine.get("n").completed is False
