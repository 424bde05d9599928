"""Plain-text tracker document parser and serializer.

Format::

    Free prelude text shown to the agent.

    - [ ] TASK-1: Open task title
    Description lines.

    - [x] TASK-2: Done task title

    - [!] TASK-3: Blocked task title

Everything before the first task line is prelude. Lines after a task line up
to the next task line belong to that task's description.
"""

from __future__ import annotations

import re

from bman_dev_agent.errors import TaskDocumentError
from bman_dev_agent.tracker.models import Task, TaskStatus, TaskTrackerDocument

_TASK_LINE = re.compile(r"^\s*-\s*\[\s*(\S?)\s*\]\s+(\S+):\s*(.*)$")
_LINE_BREAK = re.compile(r"\r?\n")


def parse_document(content: str) -> TaskTrackerDocument:
    """Parse tracker text, failing fast on unknown symbols and duplicate ids."""

    lines = _LINE_BREAK.split(content)
    index = 0
    prelude_lines: list[str] = []
    while index < len(lines) and _match_task_line(lines[index]) is None:
        prelude_lines.append(lines[index])
        index += 1

    tasks: list[Task] = []
    seen_ids: set[str] = set()
    while index < len(lines):
        match = _match_task_line(lines[index])
        index += 1
        if match is None:
            continue
        symbol, task_id, title = match.group(1), match.group(2).strip(), match.group(3).strip()
        status = TaskStatus.from_symbol(symbol)
        if status is None:
            raise TaskDocumentError(f"Unknown task status symbol: {symbol!r} (task {task_id})")
        if task_id in seen_ids:
            raise TaskDocumentError(f"Duplicate task id detected: {task_id}")
        seen_ids.add(task_id)

        description_lines: list[str] = []
        while index < len(lines) and _match_task_line(lines[index]) is None:
            description_lines.append(lines[index])
            index += 1
        tasks.append(
            Task(
                id=task_id,
                title=title,
                description=_normalize_description(description_lines),
                status=status,
            ),
        )

    return TaskTrackerDocument(
        prelude_text="\n".join(_strip_trailing_blank_lines(prelude_lines)),
        tasks=tasks,
    )


def serialize_document(document: TaskTrackerDocument) -> str:
    """Render a document; ``parse_document`` of the result yields an equal document."""

    blocks: list[str] = []
    prelude = "\n".join(_strip_trailing_blank_lines(_LINE_BREAK.split(document.prelude_text)))
    if prelude:
        blocks.append(prelude)
    blocks.extend(_render_task(task) for task in document.tasks)
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def _render_task(task: Task) -> str:
    status = TaskStatus(task.status)
    lines = [f"- [{status.symbol}] {task.id}: {task.title}".rstrip()]
    if task.description.strip():
        lines.extend(_LINE_BREAK.split(task.description))
    return "\n".join(lines)


def _match_task_line(line: str) -> re.Match[str] | None:
    if not line.strip():
        return None
    return _TASK_LINE.match(line)


def _normalize_description(lines: list[str]) -> str:
    trimmed = _strip_leading_blank_lines(_strip_trailing_blank_lines(lines))
    return "\n".join(line.strip() for line in trimmed)


def _strip_trailing_blank_lines(lines: list[str]) -> list[str]:
    end = len(lines)
    while end > 0 and not lines[end - 1].strip():
        end -= 1
    return lines[:end]


def _strip_leading_blank_lines(lines: list[str]) -> list[str]:
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    return lines[start:]
