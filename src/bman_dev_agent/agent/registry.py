"""Agent registry: builtin command vectors merged with user configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from bman_dev_agent.agent.cli_agent import CliAgent
from bman_dev_agent.errors import ConfigError

if TYPE_CHECKING:
    from bman_dev_agent.config import AgentSettings

DEFAULT_AGENT = "codex"


@dataclass(frozen=True, slots=True)
class AgentRegistryEntry:
    """Command vector used to spawn one agent; ``cmd[0]`` is the executable."""

    cmd: tuple[str, ...]


BUILTIN_REGISTRY: Mapping[str, AgentRegistryEntry] = {
    "codex": AgentRegistryEntry(
        cmd=("codex", "exec", "--sandbox", "workspace-write", "--skip-git-repo-check", "-"),
    ),
    "gemini": AgentRegistryEntry(cmd=("gemini", "--approval-mode", "auto_edit")),
    "claude": AgentRegistryEntry(
        cmd=(
            "claude",
            "--allowedTools",
            "Read,Write,Bash",
            "--output-format",
            "json",
            "-p",
            "--verbose",
        ),
    ),
}


def merge_registry(
    user_entries: Mapping[str, AgentRegistryEntry] | None,
) -> dict[str, AgentRegistryEntry]:
    """Overlay user entries on builtin defaults; a fresh dict on every call."""

    merged = dict(BUILTIN_REGISTRY)
    for raw_name, entry in (user_entries or {}).items():
        name = normalize_agent_name(raw_name)
        if name:
            merged[name] = entry
    return merged


def normalize_agent_name(value: str) -> str:
    return value.strip().lower()


def resolve_agent_name(requested: str | None, settings: AgentSettings) -> str:
    """Pick the explicitly requested agent, falling back to the configured default."""

    if requested is not None and requested.strip():
        name = normalize_agent_name(requested)
        if name not in settings.registry:
            raise ConfigError(
                f'Unsupported agent "{requested}". '
                f"Available agents: {_available(settings.registry)}",
            )
        return name

    name = normalize_agent_name(settings.default) or DEFAULT_AGENT
    if name not in settings.registry:
        raise ConfigError(
            f'Default agent "{name}" is not defined. '
            f"Available agents: {_available(settings.registry)}",
        )
    return name


def build_agent(
    name: str,
    settings: AgentSettings,
    *,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> CliAgent:
    """Resolve a registry entry into a runnable agent before any process is spawned."""

    entry = settings.registry.get(normalize_agent_name(name))
    if entry is None:
        raise ConfigError(
            f'Agent "{name}" is not configured. Available agents: {_available(settings.registry)}',
        )
    cmd = [part.strip() for part in entry.cmd if part.strip()]
    if not cmd:
        raise ConfigError(
            f'Agent "{name}" is missing a command. '
            f"Configure agent.registry.{name}.cmd in the config file.",
        )
    return CliAgent(name=normalize_agent_name(name), command=cmd, env=env, cwd=cwd)


def _available(registry: Mapping[str, AgentRegistryEntry]) -> str:
    return ", ".join(sorted(registry))
