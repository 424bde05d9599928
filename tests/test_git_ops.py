from __future__ import annotations

from pathlib import Path

import allure
import pytest

from bman_dev_agent.errors import GitError, PreflightError
from bman_dev_agent.git_ops import GitOps
from conftest import run_git

pytestmark = [
    allure.epic("Git Integration"),
    allure.feature("Working Tree & Commits"),
]


def test_clean_working_tree_passes_preflight(git_repo: Path) -> None:
    GitOps(git_repo).ensure_clean_working_tree()


def test_untracked_file_fails_preflight(git_repo: Path) -> None:
    (git_repo / "scratch.txt").write_text("wip", "utf-8")

    with pytest.raises(PreflightError, match="Working tree is not clean"):
        GitOps(git_repo).ensure_clean_working_tree()


def test_commit_stages_everything_and_returns_head_sha(git_repo: Path) -> None:
    (git_repo / "new.txt").write_text("content", "utf-8")
    (git_repo / "README.md").write_text("# changed\n", "utf-8")

    sha = GitOps(git_repo).commit("TASK-1 [completed]: Add file", "Body line\n\nMore")

    assert sha == run_git(git_repo, "rev-parse", "HEAD").strip()
    message = run_git(git_repo, "log", "-1", "--format=%B")
    assert message.startswith("TASK-1 [completed]: Add file\n\nBody line\n\nMore")
    assert run_git(git_repo, "status", "--porcelain") == ""


def test_commit_with_nothing_staged_raises_git_error(git_repo: Path) -> None:
    with pytest.raises(GitError) as error_info:
        GitOps(git_repo).commit("title", "body")

    assert error_info.value.command[:2] == ["git", "commit"]


def test_push_is_noop_unless_enabled(git_repo: Path) -> None:
    GitOps(git_repo).push()

    with pytest.raises(GitError):
        GitOps(git_repo, push_enabled=True).push()


def test_current_branch_name_and_detached_head(git_repo: Path) -> None:
    git = GitOps(git_repo)

    assert git.get_current_branch_name() == "main"

    short_sha = run_git(git_repo, "rev-parse", "--short", "HEAD").strip()
    run_git(git_repo, "checkout", "-q", "--detach")
    assert git.get_current_branch_name() == f"detached-{short_sha}"


def test_git_failure_outside_repository_raises(tmp_path: Path) -> None:
    outside = tmp_path / "plain"
    outside.mkdir()

    with pytest.raises(GitError, match="failed with exit code"):
        GitOps(outside).get_current_branch_name()
