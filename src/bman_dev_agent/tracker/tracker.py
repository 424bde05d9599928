"""File-backed task tracker operations."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from bman_dev_agent.errors import TaskDocumentError, TaskNotFoundError
from bman_dev_agent.tracker.document import parse_document, serialize_document
from bman_dev_agent.tracker.models import Task, TaskStatus, TaskTrackerDocument

logger = logging.getLogger(__name__)

_SEQUENTIAL_ID = re.compile(r"^TASK-(\d+)$", re.IGNORECASE)


class TaskTracker:
    """Reads, updates and writes one tracker document as a whole file."""

    def __init__(self, tasks_file: Path) -> None:
        self.tasks_file = Path(tasks_file)

    @property
    def resolved_path(self) -> Path:
        return self.tasks_file.resolve()

    def load_document(self) -> TaskTrackerDocument:
        try:
            content = self.resolved_path.read_text("utf-8")
        except FileNotFoundError as error:
            raise TaskDocumentError(f"Tasks file not found: {self.resolved_path}") from error
        return parse_document(content)

    def load_or_initialize_document(self) -> TaskTrackerDocument:
        """Load the document, or return an empty one when the file does not exist yet."""

        if not self.resolved_path.exists():
            return TaskTrackerDocument()
        return self.load_document()

    def save_document(self, document: TaskTrackerDocument) -> None:
        path = self.resolved_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(serialize_document(document), "utf-8")

    def pick_next_task(self, tasks: list[Task]) -> Task | None:
        """Strict FIFO: the first open task in document order."""

        return next((task for task in tasks if task.status == TaskStatus.OPEN), None)

    def mark_done(self, tasks: list[Task], task_id: str) -> list[Task]:
        return _update_status(tasks, task_id, TaskStatus.DONE)

    def mark_blocked(self, tasks: list[Task], task_id: str, reason: str = "") -> list[Task]:
        updated = _update_status(tasks, task_id, TaskStatus.BLOCKED)
        if reason:
            logger.info("Task %s blocked: %s", task_id, reason)
        return updated

    def add_task(self, title: str) -> Task:
        """Append a new open task with the next sequential id and persist immediately."""

        normalized = title.strip()
        if not normalized:
            raise TaskDocumentError("Task title must be a non-empty string.")
        document = self.load_or_initialize_document()
        task = Task(id=next_task_id(document.tasks), title=normalized)
        self.save_document(document.with_tasks([*document.tasks, task]))
        return task


def next_task_id(tasks: list[Task]) -> str:
    """Return ``TASK-<n+1>`` for the highest ``TASK-<n>`` id; ids in other shapes are ignored."""

    highest = 0
    for task in tasks:
        match = _SEQUENTIAL_ID.match(task.id.strip())
        if match is not None:
            highest = max(highest, int(match.group(1)))
    return f"TASK-{highest + 1}"


def _update_status(tasks: list[Task], task_id: str, status: TaskStatus) -> list[Task]:
    if not any(task.id == task_id for task in tasks):
        raise TaskNotFoundError(task_id)
    return [task.with_status(status) if task.id == task_id else task for task in tasks]
