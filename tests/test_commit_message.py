from __future__ import annotations

import allure

from bman_dev_agent.commit_message import (
    AI_COMMIT_WARNING,
    derive_human_message,
    format_body,
    format_title,
)
from bman_dev_agent.contract import AgentOutput, AgentOutputStatus
from bman_dev_agent.tracker import Task

pytestmark = [
    allure.epic("Git Integration"),
    allure.feature("Commit Message Formatting"),
]

TASK = Task(id="TASK-5", title="Add  login\nform")


def _output(status: AgentOutputStatus = AgentOutputStatus.SUCCESS, **overrides) -> AgentOutput:
    values = {
        "task_id": "TASK-5",
        "status": status,
        "commit_message": "Add login form\n\nRender email and password fields.",
        "changes_made": "Added form component.",
        "assumptions": "None",
        "decisions_taken": "",
        "points_of_unclarity": "None",
        "tests_run": "pytest -q",
    }
    values.update(overrides)
    return AgentOutput(**values)


def test_title_uses_commit_subject_and_status_label() -> None:
    assert format_title(TASK, _output()) == "TASK-5 [completed]: Add login form"
    assert format_title(TASK, _output(AgentOutputStatus.BLOCKED)) == (
        "TASK-5 [blocked]: Add login form"
    )
    assert format_title(TASK, _output(AgentOutputStatus.FAILED)).startswith("TASK-5 [blocked]")


def test_title_falls_back_to_collapsed_human_message() -> None:
    assert format_title(TASK, _output(commit_message="  ")) == "TASK-5 [completed]: Add login form"
    assert format_title(TASK, _output(AgentOutputStatus.FAILED, commit_message="")) == (
        "TASK-5 [blocked]: Task ended with status: failed"
    )


def test_derive_human_message_prefers_commit_message() -> None:
    assert derive_human_message(TASK, _output(commit_message=" Done \n")) == "Done"
    assert derive_human_message(TASK, _output(commit_message="")) == TASK.title
    assert derive_human_message(
        TASK,
        _output(AgentOutputStatus.BLOCKED, commit_message=""),
    ) == ("Task ended with status: blocked")


def test_body_contains_message_body_thoughts_and_warning() -> None:
    body = format_body(TASK, _output())

    assert body.startswith("Render email and password fields.\n\n---\n\nAI Thoughts\n-----------")
    assert "Changes made\n------------\nAdded form component." in body
    assert "Decisions taken\n---------------\n\nPoints of unclarity" in body
    assert "Tests run\n---------\npytest -q" in body
    assert body.endswith(AI_COMMIT_WARNING)


def test_body_uses_human_message_when_commit_message_is_empty() -> None:
    body = format_body(TASK, _output(AgentOutputStatus.BLOCKED, commit_message=""))

    assert body.startswith("Task ended with status: blocked\n\n---\n\n")


def test_body_skips_message_section_for_subject_only_commit_message() -> None:
    body = format_body(TASK, _output(commit_message="Subject only"))

    assert body.startswith("---\n\nAI Thoughts")
