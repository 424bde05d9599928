"""Git plumbing used by the orchestrator and the CLI."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from bman_dev_agent.errors import GitError, PreflightError

logger = logging.getLogger(__name__)


class GitOps:
    """Runs git commands in one working directory."""

    def __init__(self, cwd: Path | None = None, *, push_enabled: bool = False) -> None:
        self.cwd = cwd or Path.cwd()
        self.push_enabled = push_enabled

    def ensure_clean_working_tree(self) -> None:
        if self._run_git(["status", "--porcelain"]).strip():
            raise PreflightError(
                "Working tree is not clean. Commit or stash changes before proceeding.",
            )

    def commit(self, title: str, body: str) -> str:
        """Stage everything, commit with title and body paragraphs, return the new sha."""

        self._run_git(["add", "-A"])
        self._run_git(["commit", "-m", title, "-m", body])
        return self._run_git(["rev-parse", "HEAD"]).strip()

    def push(self) -> None:
        if not self.push_enabled:
            return
        logger.info("Pushing to remote")
        self._run_git(["push"])

    def get_current_branch_name(self) -> str:
        branch = self._run_git(["rev-parse", "--abbrev-ref", "HEAD"]).strip()
        if branch and branch != "HEAD":
            return branch
        short_sha = self._run_git(["rev-parse", "--short", "HEAD"]).strip()
        return f"detached-{short_sha}"

    def _run_git(self, args: list[str]) -> str:
        command = ["git", *args]
        try:
            result = subprocess.run(  # noqa: S603
                command,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as error:
            raise GitError("git executable not found.", command=command) from error
        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise GitError(
                f"`{' '.join(command)}` failed with exit code {result.returncode}: {stderr}",
                command=command,
                stderr=stderr,
            )
        return result.stdout
