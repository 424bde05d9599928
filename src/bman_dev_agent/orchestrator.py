"""Task resolution state machine: select, invoke, validate, record, commit.

One attempt resolves exactly one task::

    IDLE -> TASK_SELECTED -> PREFLIGHT_CHECKED -> AGENT_INVOKED
         -> OUTPUT_VALIDATED -> DOCUMENT_UPDATED -> COMMITTED -> DONE

A dirty working tree moves the attempt to FAILED before anything is spawned
or recorded. Any later failure also ends in FAILED: unless the tracker
document was already saved for this attempt, the task is marked blocked on a
best-effort basis, and the original error is re-raised in every case.

The tracker document is saved before the commit is created, so a crash in
between leaves the tracker reflecting a concluded attempt.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bman_dev_agent.agent.base import CodeAgent
from bman_dev_agent.agent.registry import build_agent, resolve_agent_name
from bman_dev_agent.agent.run_context import create_run_context
from bman_dev_agent.commit_message import derive_human_message, format_body, format_title
from bman_dev_agent.config import ConfigLoader, Settings
from bman_dev_agent.contract.agent_output import (
    AGENT_OUTPUT_CONTRACT,
    AgentOutput,
    AgentOutputStatus,
    read_agent_output,
)
from bman_dev_agent.contract.schema import OutputContract
from bman_dev_agent.errors import BmanError
from bman_dev_agent.git_ops import GitOps
from bman_dev_agent.prompt import build_prompt
from bman_dev_agent.tracker.models import Task, TaskTrackerDocument
from bman_dev_agent.tracker.tracker import TaskTracker

logger = logging.getLogger(__name__)


class AttemptState(str, Enum):
    """Progress of the current attempt."""

    IDLE = "idle"
    TASK_SELECTED = "task_selected"
    PREFLIGHT_CHECKED = "preflight_checked"
    AGENT_INVOKED = "agent_invoked"
    OUTPUT_VALIDATED = "output_validated"
    DOCUMENT_UPDATED = "document_updated"
    COMMITTED = "committed"
    DONE = "done"
    FAILED = "failed"


class OrchestratorError(BmanError):
    """Attempt-level failure raised by the orchestrator itself."""


class TaskMismatchError(OrchestratorError):
    """Agent reported on a different task than the one it was given."""

    def __init__(self, *, expected: str, actual: str) -> None:
        super().__init__(
            f"AgentOutput.taskId ({actual}) does not match current task ({expected}).",
        )
        self.expected = expected
        self.actual = actual


class NonSuccessOutcomeError(OrchestratorError):
    """Agent validly reported blocked/failed; the attempt was recorded and committed."""

    def __init__(self, *, task_id: str, status: AgentOutputStatus, commit_sha: str) -> None:
        super().__init__(f'Task {task_id} ended with status "{status.value}". Stopping.')
        self.task_id = task_id
        self.status = status
        self.commit_sha = commit_sha


@dataclass(slots=True)
class AttemptResult:
    """Outcome of one successful attempt."""

    task_id: str
    run_id: str
    status: AgentOutputStatus
    commit_sha: str


class Orchestrator:
    """Resolves open tasks one at a time through a code agent."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        config_loader: ConfigLoader,
        git: GitOps,
        branch_name: str,
        agent: CodeAgent | None = None,
        agent_name: str | None = None,
        tracker_factory: Callable[[Path], TaskTracker] = TaskTracker,
        contract: OutputContract = AGENT_OUTPUT_CONTRACT,
        cwd: Path | None = None,
    ) -> None:
        self.config_loader = config_loader
        self.git = git
        self.branch_name = branch_name
        self.agent = agent
        self.agent_name = agent_name
        self.tracker_factory = tracker_factory
        self.contract = contract
        self.cwd = cwd
        self.state = AttemptState.IDLE

    def run_once(self) -> AttemptResult | None:
        """Resolve the next open task; ``None`` when there is nothing to do."""

        self._transition(AttemptState.IDLE)
        settings = self._load_settings()
        agent = self._resolve_agent(settings)
        tracker = self.tracker_factory(settings.tasks_file)
        document = tracker.load_document()
        task = tracker.pick_next_task(document.tasks)
        if task is None:
            logger.info("Orchestrator: no open tasks. Nothing to run.")
            return None

        self._transition(AttemptState.TASK_SELECTED)
        logger.info("Orchestrator: running task %s - %s", task.id, task.title)

        try:
            self.git.ensure_clean_working_tree()
        except BmanError:
            self._transition(AttemptState.FAILED)
            raise
        self._transition(AttemptState.PREFLIGHT_CHECKED)

        document_saved = False
        try:
            ctx = create_run_context(task=task, attempt=1, output_dir=settings.output_dir)
            prompt = build_prompt(
                task=task,
                document=document,
                run_context=ctx,
                contract=self.contract,
                cwd=self.cwd,
            )
            agent.run(prompt, ctx)
            self._transition(AttemptState.AGENT_INVOKED)

            output = read_agent_output(ctx.output_path, self.contract)
            if output.task_id != task.id:
                raise TaskMismatchError(expected=task.id, actual=output.task_id)
            self._transition(AttemptState.OUTPUT_VALIDATED)

            tracker.save_document(_apply_outcome(tracker, document, task, output))
            document_saved = True
            self._transition(AttemptState.DOCUMENT_UPDATED)

            commit_sha = self.git.commit(format_title(task, output), format_body(task, output))
            self.git.push()
            self._transition(AttemptState.COMMITTED)
            logger.info("Orchestrator: created commit %s", commit_sha)
            logger.info(
                'Orchestrator: task %s completed with status "%s"',
                task.id,
                output.status.value,
            )

            if not output.succeeded:
                raise NonSuccessOutcomeError(
                    task_id=task.id,
                    status=output.status,
                    commit_sha=commit_sha,
                )
        except Exception as error:
            self._transition(AttemptState.FAILED)
            logger.error("Orchestrator: task %s failed - %s", task.id, error)
            if not document_saved:
                _record_blocked(tracker, document, task, reason=str(error))
            raise

        self._transition(AttemptState.DONE)
        return AttemptResult(
            task_id=task.id,
            run_id=ctx.run_id,
            status=output.status,
            commit_sha=commit_sha,
        )

    def run_all(self) -> int:
        """Run attempts until no open task remains; any error stops the batch."""

        completed = 0
        while True:
            settings = self._load_settings()
            tracker = self.tracker_factory(settings.tasks_file)
            next_task = tracker.pick_next_task(tracker.load_document().tasks)
            if next_task is None:
                return completed
            logger.info("Orchestrator: starting task %s from run_all", next_task.id)
            self.run_once()
            completed += 1

    def _load_settings(self) -> Settings:
        settings = self.config_loader.load(self.branch_name)
        self.config_loader.validate(settings)
        return settings

    def _resolve_agent(self, settings: Settings) -> CodeAgent:
        if self.agent is not None:
            return self.agent
        name = resolve_agent_name(self.agent_name, settings.agent)
        return build_agent(name, settings.agent, cwd=self.cwd)

    def _transition(self, state: AttemptState) -> None:
        logger.debug("Orchestrator: %s -> %s", self.state.value, state.value)
        self.state = state


def _apply_outcome(
    tracker: TaskTracker,
    document: TaskTrackerDocument,
    task: Task,
    output: AgentOutput,
) -> TaskTrackerDocument:
    if output.succeeded:
        return document.with_tasks(tracker.mark_done(document.tasks, task.id))
    reason = derive_human_message(task, output)
    return document.with_tasks(tracker.mark_blocked(document.tasks, task.id, reason))


def _record_blocked(
    tracker: TaskTracker,
    document: TaskTrackerDocument,
    task: Task,
    *,
    reason: str,
) -> None:
    try:
        updated = tracker.mark_blocked(document.tasks, task.id, reason)
        tracker.save_document(document.with_tasks(updated))
    except Exception:  # noqa: BLE001
        logger.warning(
            "Orchestrator: could not record task %s as blocked",
            task.id,
            exc_info=True,
        )
