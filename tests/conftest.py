"""Shared test fixtures."""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pytest

ECHO_AGENT_COMMAND = [sys.executable, "-m", "bman_dev_agent.agent.echo_agent"]


def run_git(cwd: Path, *args: str) -> str:
    result = subprocess.run(  # noqa: S603
        ["git", *args],  # noqa: S607
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def commit_all(cwd: Path, message: str = "Update fixtures") -> None:
    run_git(cwd, "add", "-A")
    run_git(cwd, "commit", "-q", "-m", message)


def write_config(config_path: Path, payload: dict) -> Path:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(payload), "utf-8")
    return config_path


@pytest.fixture()
def git_repo(tmp_path: Path) -> Path:
    """Real git repository with one commit on branch ``main``."""

    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "-q")
    run_git(repo, "checkout", "-q", "-b", "main")
    run_git(repo, "config", "user.email", "dev@example.com")
    run_git(repo, "config", "user.name", "Dev")
    run_git(repo, "config", "commit.gpgsign", "false")
    (repo / "README.md").write_text("# demo\n", "utf-8")
    run_git(repo, "add", "-A")
    run_git(repo, "commit", "-q", "-m", "Initial commit")
    return repo


@pytest.fixture()
def echo_agent_config(git_repo: Path, tmp_path: Path):
    """Config routing the default agent to the local echo agent; outputs live outside the repo."""

    def _write(*agent_args: str) -> Path:
        return write_config(
            git_repo / ".bman" / "config.json",
            {
                "outputDir": str(tmp_path / "agent-output"),
                "agent": {
                    "default": "echo",
                    "registry": {"echo": {"cmd": [*ECHO_AGENT_COMMAND, *agent_args]}},
                },
            },
        )

    return _write
