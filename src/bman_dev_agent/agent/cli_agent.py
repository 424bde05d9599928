"""Subprocess-based agent runner for CLI code agents."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from bman_dev_agent.agent.base import RunContext
from bman_dev_agent.errors import BmanError

logger = logging.getLogger(__name__)

OUTPUT_PATH_ENV = "OUTPUT_PATH"


class AgentInvocationError(BmanError):
    """Agent process could not produce an output file."""

    def __init__(self, message: str, *, agent: str) -> None:
        super().__init__(message)
        self.agent = agent


class AgentExitError(AgentInvocationError):
    """Agent process exited with a non-zero code."""

    def __init__(self, *, agent: str, code: int, signal_name: str | None) -> None:
        suffix = f" (signal {signal_name})" if signal_name else ""
        super().__init__(f"{agent} agent exited with code {code}{suffix}", agent=agent)
        self.code = code
        self.signal = signal_name


class AgentOutputMissingError(AgentInvocationError):
    """Agent exited successfully without writing its output file."""

    def __init__(self, *, agent: str, output_path: Path) -> None:
        super().__init__(f"{agent} agent did not write output to {output_path}", agent=agent)
        self.output_path = output_path


class AgentSpawnError(AgentInvocationError):
    """Agent process could not be started."""


class CliAgent:
    """Spawn a configured argv, feed the prompt on stdin, expect JSON at OUTPUT_PATH."""

    def __init__(
        self,
        *,
        name: str,
        command: Sequence[str],
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> None:
        if not command:
            raise ValueError(f"Agent {name!r} needs a non-empty command.")
        self.name = name
        self.command = list(command)
        self.env = dict(env or {})
        self.cwd = cwd

    def run(self, prompt: str, ctx: RunContext) -> None:
        output_path = Path(ctx.output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        log_path = build_log_path(ctx, self.name)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("%s: running %s and writing logs to %s", self.name, self.command[0], log_path)

        env = os.environ.copy()
        env.update(self.env)
        env[OUTPUT_PATH_ENV] = str(output_path)

        try:
            with log_path.open("w", encoding="utf-8") as log_handle:
                returncode = _run_subprocess(
                    run_args=self.command,
                    cwd=self.cwd,
                    env=env,
                    prompt=prompt,
                    log_handle=log_handle,
                )
        except FileNotFoundError as error:
            raise AgentSpawnError(
                f"{self.name} agent command not found: {self.command[0]}",
                agent=self.name,
            ) from error
        except OSError as error:
            raise AgentSpawnError(
                f"{self.name} agent failed to start: {error}",
                agent=self.name,
            ) from error

        if returncode != 0:
            raise AgentExitError(
                agent=self.name,
                code=returncode,
                signal_name=_signal_name(returncode),
            )
        if not output_path.exists():
            raise AgentOutputMissingError(agent=self.name, output_path=output_path)


def build_log_path(ctx: RunContext, agent_name: str) -> Path:
    """``<output root>/logs/<agent>-<task>-<timestamp>.log``; output root is two levels up."""

    output_root = Path(ctx.output_path).parent.parent
    return output_root / "logs" / f"{agent_name}-{ctx.task_id}-{ctx.timestamp}.log"


def _run_subprocess(
    *,
    run_args: list[str],
    cwd: Path | None,
    env: dict[str, str],
    prompt: str,
    log_handle,
) -> int:
    # stderr shares the log handle; interleaving order between the streams is not preserved.
    process = subprocess.Popen(  # noqa: S603
        run_args,
        cwd=cwd,
        env=env,
        stdin=subprocess.PIPE,
        stdout=log_handle,
        stderr=subprocess.STDOUT,
        text=True,
        encoding="utf-8",
    )
    process.communicate(input=prompt)
    return process.returncode


def _signal_name(returncode: int) -> str | None:
    if returncode >= 0:
        return None
    try:
        return signal.Signals(-returncode).name
    except ValueError:
        return None
