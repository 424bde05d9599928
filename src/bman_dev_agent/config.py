"""Branch-scoped runtime configuration loaded from ``.bman/config.json``."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import quote

from bman_dev_agent.agent.registry import (
    DEFAULT_AGENT,
    AgentRegistryEntry,
    merge_registry,
    normalize_agent_name,
)
from bman_dev_agent.errors import ConfigError

DEFAULT_CONFIG_PATH = Path(".bman") / "config.json"
CONFIG_PATH_ENV = "BMAN_CONFIG_PATH"


@dataclass(slots=True)
class AgentSettings:
    """Default agent plus the merged name -> command registry."""

    default: str = DEFAULT_AGENT
    registry: dict[str, AgentRegistryEntry] = field(default_factory=lambda: merge_registry(None))


@dataclass(slots=True)
class Settings:
    """Resolved settings for one branch."""

    tasks_file: Path
    output_dir: Path
    agent: AgentSettings = field(default_factory=AgentSettings)

    def validate(self) -> None:
        """Raise configuration error if required values are empty or inconsistent."""

        if not str(self.tasks_file).strip():
            raise ConfigError("tasksFile must be a non-empty string.")
        if not str(self.output_dir).strip():
            raise ConfigError("outputDir must be a non-empty string.")
        if not self.agent.default.strip():
            raise ConfigError("agent.default must be a non-empty string.")
        if self.agent.default not in self.agent.registry:
            raise ConfigError(
                f'agent.default "{self.agent.default}" is not defined in agent.registry.',
            )
        for name, entry in self.agent.registry.items():
            if not entry.cmd or any(not part.strip() for part in entry.cmd):
                raise ConfigError(
                    f"agent.registry.{name}.cmd must be a non-empty array of strings.",
                )


class ConfigLoader:
    """Loads the JSON config file and fills branch-scoped defaults."""

    def __init__(self, config_path: Path | None = None, *, cwd: Path | None = None) -> None:
        """Relative paths, the config file's included, are anchored at ``cwd`` when given."""

        self.cwd = cwd
        self.config_path = self._anchor(
            config_path or Path(os.getenv(CONFIG_PATH_ENV, str(DEFAULT_CONFIG_PATH))),
        )

    def load(self, branch_name: str) -> Settings:
        resolved = self.config_path.resolve()
        config_dir = resolved.parent
        config_dir.mkdir(parents=True, exist_ok=True)

        raw = _read_config_file(resolved)
        raw_tasks_file = raw.get("tasksFile")
        raw_output_dir = raw.get("outputDir")
        if raw_tasks_file is not None and not _is_non_empty_string(raw_tasks_file):
            raise ConfigError("tasksFile must be a non-empty string.")
        if raw_output_dir is not None and not _is_non_empty_string(raw_output_dir):
            raise ConfigError("outputDir must be a non-empty string.")

        if raw_tasks_file is None and not branch_name.strip():
            raise ConfigError("Branch name is required to determine default tasks file path.")
        tasks_file = (
            self._anchor(Path(raw_tasks_file))
            if raw_tasks_file is not None
            else default_tasks_file_path(branch_name, config_dir)
        )
        output_dir = (
            self._anchor(Path(raw_output_dir))
            if raw_output_dir is not None
            else config_dir / "output"
        )

        output_dir.resolve().mkdir(parents=True, exist_ok=True)
        tasks_file.resolve().parent.mkdir(parents=True, exist_ok=True)

        return Settings(
            tasks_file=tasks_file,
            output_dir=output_dir,
            agent=_build_agent_settings(raw.get("agent")),
        )

    def validate(self, settings: Settings) -> None:
        settings.validate()

    def _anchor(self, path: Path) -> Path:
        if self.cwd is None or path.is_absolute():
            return path
        return self.cwd / path


def tracker_folder_name(branch_name: str) -> str:
    """Percent-encode a branch name into a single filesystem-safe path segment."""

    resolved = branch_name.strip()
    if not resolved:
        raise ConfigError("Branch name is required to resolve tracker folder name.")
    return quote(resolved, safe="")


def default_tasks_file_path(branch_name: str, base_dir: Path) -> Path:
    return base_dir.resolve() / "tracker" / tracker_folder_name(branch_name) / "tasks.md"


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text("utf-8"))
    except json.JSONDecodeError as error:
        raise ConfigError(f"Config file is not valid JSON: {path}: {error}") from error
    if not isinstance(payload, dict):
        raise ConfigError(f"Expected JSON object in {path}")
    return payload


def _build_agent_settings(raw_agent: Any) -> AgentSettings:
    agent = raw_agent if isinstance(raw_agent, dict) else {}
    raw_default = agent.get("default")
    default = normalize_agent_name(raw_default) if isinstance(raw_default, str) else ""
    raw_registry = agent.get("registry")

    user_entries: dict[str, AgentRegistryEntry] = {}
    if isinstance(raw_registry, dict):
        for name, value in raw_registry.items():
            entry = value if isinstance(value, dict) else {}
            user_entries[name] = AgentRegistryEntry(cmd=_normalize_cmd(entry.get("cmd")))

    return AgentSettings(default=default or DEFAULT_AGENT, registry=merge_registry(user_entries))


def _normalize_cmd(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    parts = tuple(item.strip() if isinstance(item, str) else "" for item in value)
    if not parts or any(not part for part in parts):
        return ()
    return parts


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())
