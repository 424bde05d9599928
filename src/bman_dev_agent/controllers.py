"""CLI-facing controller for task resolution and tracker commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from bman_dev_agent.config import ConfigLoader, Settings
from bman_dev_agent.errors import BmanError, GitError
from bman_dev_agent.git_ops import GitOps
from bman_dev_agent.orchestrator import Orchestrator
from bman_dev_agent.tracker.models import TaskStatus
from bman_dev_agent.tracker.tracker import TaskTracker

BLOCKED_TASKS_MESSAGE = "Blocked tasks present. Resolve blocked tasks before starting new work."
NO_OPEN_TASKS_MESSAGE = "No open tasks found. Nothing to run."


class BlockedTasksError(BmanError):
    """The tracker still has blocked tasks; no new attempt is started."""


@dataclass(slots=True)
class ResolveCommand:
    """CLI input for resolving open tasks."""

    config_path: Path | None
    run_all: bool = False
    agent: str | None = None
    push: bool = False


@dataclass(slots=True)
class ResolveResult:
    """Resolve report to render in CLI; ``to_stderr`` marks informational no-op output."""

    lines: list[str]
    to_stderr: bool = False


@dataclass(slots=True)
class AddTaskCommand:
    """CLI input for appending a task."""

    config_path: Path | None
    description: str


@dataclass(slots=True)
class ListTasksCommand:
    """CLI input for listing tracker tasks."""

    config_path: Path | None
    status: str | None = None


class TaskCliController:
    """Wires git, configuration, tracker and orchestrator for CLI commands."""

    def __init__(
        self,
        *,
        cwd: Path | None = None,
        git_factory: Callable[..., GitOps] = GitOps,
        orchestrator_factory: Callable[..., Orchestrator] = Orchestrator,
    ) -> None:
        self.cwd = cwd
        self.git_factory = git_factory
        self.orchestrator_factory = orchestrator_factory

    def resolve(self, command: ResolveCommand) -> ResolveResult:
        git = self.git_factory(self.cwd, push_enabled=command.push)
        branch_name = _branch_name(git)
        config_loader = ConfigLoader(command.config_path, cwd=self.cwd)
        settings = _load_settings(config_loader, branch_name)

        tasks = TaskTracker(settings.tasks_file).load_document().tasks
        if any(task.status == TaskStatus.BLOCKED for task in tasks):
            raise BlockedTasksError(BLOCKED_TASKS_MESSAGE)
        if not any(task.status == TaskStatus.OPEN for task in tasks):
            return ResolveResult(lines=[NO_OPEN_TASKS_MESSAGE], to_stderr=True)

        orchestrator = self.orchestrator_factory(
            config_loader=config_loader,
            git=git,
            branch_name=branch_name,
            agent_name=command.agent,
            cwd=self.cwd,
        )
        if command.run_all:
            completed = orchestrator.run_all()
            return ResolveResult(lines=[f"Resolved {completed} task(s)."])

        result = orchestrator.run_once()
        if result is None:
            return ResolveResult(lines=[NO_OPEN_TASKS_MESSAGE], to_stderr=True)
        return ResolveResult(
            lines=[
                f"Resolved {result.task_id}: status={result.status.value} "
                f"commit={result.commit_sha} run_id={result.run_id}",
            ],
        )

    def add_task(self, command: AddTaskCommand) -> list[str]:
        settings = self._settings(command.config_path)
        tracker = TaskTracker(settings.tasks_file)
        task = tracker.add_task(command.description)
        return [f"Added task {task.id} to {tracker.resolved_path}"]

    def list_tasks(self, command: ListTasksCommand) -> list[str]:
        """Show tracker tasks of the current branch, optionally filtered by status."""

        settings = self._settings(command.config_path)
        document = TaskTracker(settings.tasks_file).load_or_initialize_document()
        status = TaskStatus(command.status.lower()) if command.status else None
        tasks = [task for task in document.tasks if status is None or task.status == status]
        if not tasks:
            return ["No tasks found."]
        return [f"{task.id} [{task.status.value}] {task.title}" for task in tasks]

    def _settings(self, config_path: Path | None) -> Settings:
        branch_name = _branch_name(self.git_factory(self.cwd))
        return _load_settings(ConfigLoader(config_path, cwd=self.cwd), branch_name)


def _branch_name(git: GitOps) -> str:
    try:
        return git.get_current_branch_name()
    except GitError as error:
        raise GitError(
            f"Git is required to run bman-dev-agent: {error}",
            command=error.command,
            stderr=error.stderr,
        ) from error


def _load_settings(config_loader: ConfigLoader, branch_name: str) -> Settings:
    settings = config_loader.load(branch_name)
    config_loader.validate(settings)
    return settings
