"""Task tracker document model, parser and operations."""

from bman_dev_agent.tracker.document import parse_document, serialize_document
from bman_dev_agent.tracker.models import Task, TaskStatus, TaskTrackerDocument
from bman_dev_agent.tracker.tracker import TaskTracker, next_task_id

__all__ = [
    "Task",
    "TaskStatus",
    "TaskTracker",
    "TaskTrackerDocument",
    "next_task_id",
    "parse_document",
    "serialize_document",
]
