"""CLI entrypoint for bman-dev-agent."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import rich_click as click

from bman_dev_agent import __version__
from bman_dev_agent.config import CONFIG_PATH_ENV
from bman_dev_agent.controllers import (
    AddTaskCommand,
    ListTasksCommand,
    ResolveCommand,
    TaskCliController,
)
from bman_dev_agent.errors import BmanError
from bman_dev_agent.tracker.models import TaskStatus

CommandT = TypeVar("CommandT")
ResultT = TypeVar("ResultT")

click.rich_click.USE_MARKDOWN = True
TASK_CONTROLLER = TaskCliController()


@click.group()
@click.version_option(version=__version__, prog_name="bman-dev-agent")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Progress log verbosity (written to stderr).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    envvar=CONFIG_PATH_ENV,
    default=None,
    help="Path to config JSON. Defaults to `.bman/config.json`.",
)
@click.pass_context
def bman_dev_agent(ctx: click.Context, log_level: str, config_path: Path | None) -> None:
    """Resolve tracker tasks one at a time with a CLI code agent."""

    logging.basicConfig(level=log_level.upper(), format="%(message)s")
    ctx.obj = {"config_path": config_path}


@bman_dev_agent.command("resolve")
@click.option("--all", "run_all", is_flag=True, help="Keep resolving until no open task remains.")
@click.option("--agent", default=None, help="Registry agent name. Defaults to config default.")
@click.option("--push", is_flag=True, help="Push after each commit.")
@click.pass_context
def resolve(ctx: click.Context, run_all: bool, agent: str | None, push: bool) -> None:
    """Resolve the next open task (or all of them) and commit the result."""

    result = _call(
        TASK_CONTROLLER.resolve,
        ResolveCommand(
            config_path=ctx.obj["config_path"],
            run_all=run_all,
            agent=agent,
            push=push,
        ),
    )
    _emit_lines(result.lines, err=result.to_stderr)


@bman_dev_agent.command("add-task")
@click.argument("description")
@click.pass_context
def add_task(ctx: click.Context, description: str) -> None:
    """Append a new open task to the current branch tracker."""

    _emit_lines(
        _call(
            TASK_CONTROLLER.add_task,
            AddTaskCommand(config_path=ctx.obj["config_path"], description=description),
        ),
    )


@bman_dev_agent.command("tasks")
@click.option(
    "--status",
    type=click.Choice([status.value for status in TaskStatus], case_sensitive=False),
    default=None,
    help="Optional status filter.",
)
@click.pass_context
def list_tasks(ctx: click.Context, status: str | None) -> None:
    """List tasks of the current branch tracker."""

    _emit_lines(
        _call(
            TASK_CONTROLLER.list_tasks,
            ListTasksCommand(config_path=ctx.obj["config_path"], status=status),
        ),
    )


def _call(handler: Callable[[CommandT], ResultT], command: CommandT) -> ResultT:
    try:
        return handler(command)
    except BmanError as error:
        raise click.ClickException(str(error)) from error


def _emit_lines(lines: list[str], *, err: bool = False) -> None:
    for line in lines:
        click.echo(line, err=err)


if __name__ == "__main__":  # pragma: no cover
    bman_dev_agent()
