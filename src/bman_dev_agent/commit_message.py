"""Commit title/body construction from a task and the validated agent output."""

from __future__ import annotations

import re

from bman_dev_agent.contract.agent_output import AgentOutput
from bman_dev_agent.tracker.models import Task

AI_COMMIT_WARNING = "\n".join(
    (
        "⚠️ AI-GENERATED COMMIT.",
        "",
        "This change was produced by an AI agent and has NOT been reviewed or validated "
        "by a human.",
        "Do not assume correctness, completeness, or production readiness.",
        "",
        "Human review is required.",
    ),
)

_WHITESPACE = re.compile(r"\s+")
_LINE_BREAK = re.compile(r"\r?\n")


def derive_human_message(task: Task, output: AgentOutput) -> str:
    """Commit message, else task title on success, else a status fallback."""

    commit_message = output.commit_message.strip()
    if commit_message:
        return commit_message
    if output.succeeded:
        return task.title
    return f"Task ended with status: {output.status.value}"


def format_title(task: Task, output: AgentOutput) -> str:
    subject, _ = _split_commit_message(output.commit_message)
    label = "completed" if output.succeeded else "blocked"
    message = subject or _WHITESPACE.sub(" ", derive_human_message(task, output)).strip()
    return f"{task.id} [{label}]: {message}".strip()


def format_body(task: Task, output: AgentOutput) -> str:
    subject, body = _split_commit_message(output.commit_message)
    human_message = body or ("" if subject else derive_human_message(task, output))
    sections = [
        human_message.strip(),
        "---",
        _format_thoughts(output),
        AI_COMMIT_WARNING,
    ]
    return "\n\n".join(section for section in sections if section)


def _split_commit_message(message: str) -> tuple[str, str]:
    trimmed = message.strip()
    if not trimmed:
        return "", ""
    first, *rest = _LINE_BREAK.split(trimmed)
    return first.strip(), "\n".join(rest).strip()


def _format_thoughts(output: AgentOutput) -> str:
    entries = (
        ("Changes made", output.changes_made),
        ("Assumptions", output.assumptions),
        ("Decisions taken", output.decisions_taken),
        ("Points of unclarity", output.points_of_unclarity),
        ("Tests run", output.tests_run),
    )
    sections = ["AI Thoughts\n-----------"]
    for label, content in entries:
        heading = f"{label}\n{'-' * len(label)}"
        trimmed = content.strip()
        sections.append(f"{heading}\n{trimmed}" if trimmed else heading)
    return "\n\n".join(sections)
