"""Error taxonomy shared by the task resolution engine."""

from __future__ import annotations


class BmanError(RuntimeError):
    """Base class for all domain errors surfaced to the CLI."""


class ConfigError(BmanError):
    """Configuration is missing, malformed or inconsistent."""


class TaskDocumentError(BmanError):
    """Tracker document cannot be parsed or serialized."""


class TaskNotFoundError(BmanError):
    """Status transition requested for an id that is not in the document."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f'Task with id "{task_id}" not found.')
        self.task_id = task_id


class GitError(BmanError):
    """Git command failed."""

    def __init__(self, message: str, *, command: list[str] | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.command = command or []
        self.stderr = stderr


class PreflightError(GitError):
    """Working tree is not clean; an attempt must not start."""
