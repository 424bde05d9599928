"""Prompt text handed to the agent on stdin."""

from __future__ import annotations

import os
from pathlib import Path

from bman_dev_agent.agent.base import RunContext
from bman_dev_agent.contract.schema import OutputContract, render_contract
from bman_dev_agent.tracker.models import Task, TaskStatus, TaskTrackerDocument

INSTRUCTIONS = (
    "You are executing exactly one task.",
    "Write a single JSON object to the output file path provided below.",
    "Do not print the JSON; do not write anywhere else.",
    "Do not describe execution flow or git operations.",
)


def build_prompt(
    *,
    task: Task,
    document: TaskTrackerDocument,
    run_context: RunContext,
    contract: OutputContract,
    cwd: Path | None = None,
) -> str:
    """Assemble prelude, completed tasks, the task itself, output path and contract."""

    sections = [
        _section("Tasks file prelude", document.prelude_text or "None."),
        _section("Completed tasks", _format_completed_tasks(document.tasks, task.id)),
        _section("Task", _format_task(task)),
        _section("Output file", relative_to_cwd(run_context.output_path, cwd)),
        _section("Output contract", render_contract(contract)),
        _section("Instructions", "\n".join(INSTRUCTIONS)),
    ]
    return "\n\n".join(sections).rstrip()


def relative_to_cwd(path: Path, cwd: Path | None = None) -> str:
    base = (cwd or Path.cwd()).resolve()
    return os.path.relpath(Path(path).resolve(), base)


def _section(title: str, body: str) -> str:
    return f"{title}:\n{body.strip()}"


def _format_task(task: Task) -> str:
    description = f"\n{task.description}" if task.description else ""
    return f"{task.id} - {task.title}{description}"


def _format_completed_tasks(tasks: list[Task], current_id: str) -> str:
    completed = [
        task for task in tasks if task.id != current_id and task.status == TaskStatus.DONE
    ]
    if not completed:
        return "None."
    return "\n".join(f"{task.id} [{task.status.value}] - {task.title}" for task in completed)
