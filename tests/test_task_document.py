from __future__ import annotations

import allure
import pytest

from bman_dev_agent.errors import TaskDocumentError
from bman_dev_agent.tracker import (
    Task,
    TaskStatus,
    TaskTrackerDocument,
    parse_document,
    serialize_document,
)

pytestmark = [
    allure.epic("Task Tracker"),
    allure.feature("Document Format"),
]

SAMPLE = """# Sprint notes
Keep changes small.

- [ ] TASK-1: Add login form
Render email and password fields.
  Validate on submit.

- [x] TASK-2: Set up CI

- [!] TASK-3: Migrate database
Needs credentials.
"""


def test_parse_document_reads_prelude_tasks_and_descriptions() -> None:
    document = parse_document(SAMPLE)

    assert document.prelude_text == "# Sprint notes\nKeep changes small."
    assert [task.id for task in document.tasks] == ["TASK-1", "TASK-2", "TASK-3"]
    assert [task.status for task in document.tasks] == [
        TaskStatus.OPEN,
        TaskStatus.DONE,
        TaskStatus.BLOCKED,
    ]
    assert document.tasks[0].title == "Add login form"
    assert document.tasks[0].description == (
        "Render email and password fields.\nValidate on submit."
    )
    assert document.tasks[1].description == ""
    assert document.tasks[2].description == "Needs credentials."


def test_parse_document_accepts_loose_checkbox_spacing_and_uppercase_done() -> None:
    document = parse_document("  -  [X]   A-1:   Spaced title  \n- [] A-2: Empty box\n")

    assert document.prelude_text == ""
    assert document.tasks[0] == Task(id="A-1", title="Spaced title", status=TaskStatus.DONE)
    assert document.tasks[1].status == TaskStatus.OPEN


def test_parse_document_without_task_lines_is_all_prelude() -> None:
    document = parse_document("Just notes.\n\n")

    assert document.prelude_text == "Just notes."
    assert document.tasks == []


def test_parse_document_rejects_duplicate_ids_regardless_of_status() -> None:
    content = "- [x] TASK-1: First\n- [ ] TASK-1: Second\n"

    with pytest.raises(TaskDocumentError, match="Duplicate task id detected: TASK-1"):
        parse_document(content)


def test_parse_document_rejects_unknown_status_symbol() -> None:
    with pytest.raises(TaskDocumentError, match="Unknown task status symbol"):
        parse_document("- [?] TASK-1: Mystery\n")


def test_serialize_document_renders_blocks_separated_by_blank_lines() -> None:
    document = TaskTrackerDocument(
        prelude_text="Intro",
        tasks=[
            Task(id="TASK-1", title="First", description="Line one\nLine two"),
            Task(id="TASK-2", title="Second", status=TaskStatus.BLOCKED),
        ],
    )

    assert serialize_document(document) == (
        "Intro\n\n- [ ] TASK-1: First\nLine one\nLine two\n\n- [!] TASK-2: Second\n"
    )


def test_serialize_empty_document_is_empty_string() -> None:
    assert serialize_document(TaskTrackerDocument()) == ""


def test_parse_of_serialized_document_yields_equal_document() -> None:
    document = parse_document(SAMPLE)

    assert parse_document(serialize_document(document)) == document


def test_serialize_is_stable_after_one_normalization_pass() -> None:
    once = serialize_document(parse_document(SAMPLE))

    assert serialize_document(parse_document(once)) == once
