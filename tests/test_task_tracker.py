from __future__ import annotations

from pathlib import Path

import allure
import pytest

from bman_dev_agent.errors import TaskDocumentError, TaskNotFoundError
from bman_dev_agent.tracker import Task, TaskStatus, TaskTracker, next_task_id

pytestmark = [
    allure.epic("Task Tracker"),
    allure.feature("Selection & Status Transitions"),
]


def _tasks() -> list[Task]:
    return [
        Task(id="TASK-1", title="Done already", status=TaskStatus.DONE),
        Task(id="TASK-2", title="First open"),
        Task(id="TASK-3", title="Second open"),
    ]


def test_pick_next_task_returns_first_open_task_in_document_order(tmp_path: Path) -> None:
    tracker = TaskTracker(tmp_path / "tasks.md")

    assert tracker.pick_next_task(_tasks()).id == "TASK-2"


def test_pick_next_task_returns_none_when_nothing_is_open(tmp_path: Path) -> None:
    tracker = TaskTracker(tmp_path / "tasks.md")
    tasks = [Task(id="TASK-1", title="x", status=TaskStatus.BLOCKED)]

    assert tracker.pick_next_task(tasks) is None
    assert tracker.pick_next_task([]) is None


def test_mark_done_and_blocked_return_new_lists(tmp_path: Path) -> None:
    tracker = TaskTracker(tmp_path / "tasks.md")
    tasks = _tasks()

    done = tracker.mark_done(tasks, "TASK-2")
    blocked = tracker.mark_blocked(tasks, "TASK-3", reason="Needs API key")

    assert done[1].status == TaskStatus.DONE
    assert blocked[2].status == TaskStatus.BLOCKED
    assert tasks == _tasks()


def test_status_transition_on_unknown_id_raises_and_leaves_input_unchanged(
    tmp_path: Path,
) -> None:
    tracker = TaskTracker(tmp_path / "tasks.md")
    tasks = _tasks()

    with pytest.raises(TaskNotFoundError, match='Task with id "TASK-9" not found.'):
        tracker.mark_done(tasks, "TASK-9")
    with pytest.raises(TaskNotFoundError):
        tracker.mark_blocked(tasks, "TASK-9")
    assert tasks == _tasks()


def test_load_document_missing_file_raises(tmp_path: Path) -> None:
    tracker = TaskTracker(tmp_path / "missing" / "tasks.md")

    with pytest.raises(TaskDocumentError, match="Tasks file not found"):
        tracker.load_document()
    assert tracker.load_or_initialize_document().tasks == []


def test_save_then_load_round_trips_through_file(tmp_path: Path) -> None:
    tasks_file = tmp_path / "nested" / "tasks.md"
    tracker = TaskTracker(tasks_file)
    document = tracker.load_or_initialize_document().with_tasks(_tasks())

    tracker.save_document(document)

    assert tasks_file.read_text("utf-8").startswith("- [x] TASK-1: Done already\n")
    assert tracker.load_document() == document


def test_add_task_appends_next_sequential_id_ignoring_other_shapes(tmp_path: Path) -> None:
    tasks_file = tmp_path / "tasks.md"
    tasks_file.write_text(
        "Prelude\n\n- [x] TASK-3: Old\n\n- [ ] OTHER: Not sequential\n",
        "utf-8",
    )
    tracker = TaskTracker(tasks_file)

    task = tracker.add_task("  Write docs  ")

    assert task == Task(id="TASK-4", title="Write docs")
    document = tracker.load_document()
    assert document.prelude_text == "Prelude"
    assert [item.id for item in document.tasks] == ["TASK-3", "OTHER", "TASK-4"]


def test_add_task_initializes_missing_document(tmp_path: Path) -> None:
    tracker = TaskTracker(tmp_path / "fresh" / "tasks.md")

    task = tracker.add_task("First task")

    assert task.id == "TASK-1"
    assert tracker.resolved_path.read_text("utf-8") == "- [ ] TASK-1: First task\n"


def test_add_task_rejects_blank_title(tmp_path: Path) -> None:
    tracker = TaskTracker(tmp_path / "tasks.md")

    with pytest.raises(TaskDocumentError, match="non-empty"):
        tracker.add_task("   ")
    assert not (tmp_path / "tasks.md").exists()


def test_next_task_id_uses_highest_sequential_suffix() -> None:
    tasks = [
        Task(id="TASK-7", title="a"),
        Task(id="task-2", title="b"),
        Task(id="FEAT-99", title="c"),
    ]

    assert next_task_id(tasks) == "TASK-8"
    assert next_task_id([]) == "TASK-1"
