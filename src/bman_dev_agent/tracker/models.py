"""Domain models for the task tracker document."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class TaskStatus(str, Enum):
    """Task lifecycle states stored as checkbox symbols."""

    OPEN = "open"
    DONE = "done"
    BLOCKED = "blocked"

    @property
    def symbol(self) -> str:
        return _STATUS_TO_SYMBOL[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> TaskStatus | None:
        """Map a checkbox symbol (already stripped) to a status, or None if unknown."""

        return _SYMBOL_TO_STATUS.get(symbol.lower())


_STATUS_TO_SYMBOL = {
    TaskStatus.OPEN: " ",
    TaskStatus.DONE: "x",
    TaskStatus.BLOCKED: "!",
}
_SYMBOL_TO_STATUS = {
    "": TaskStatus.OPEN,
    "x": TaskStatus.DONE,
    "!": TaskStatus.BLOCKED,
}


@dataclass(frozen=True, slots=True)
class Task:
    """One unit of delegated work."""

    id: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.OPEN

    def with_status(self, status: TaskStatus) -> Task:
        return replace(self, status=status)


@dataclass(slots=True)
class TaskTrackerDocument:
    """Persisted task list plus the free text that precedes it."""

    prelude_text: str = ""
    tasks: list[Task] = field(default_factory=list)

    def with_tasks(self, tasks: list[Task]) -> TaskTrackerDocument:
        return TaskTrackerDocument(prelude_text=self.prelude_text, tasks=list(tasks))
