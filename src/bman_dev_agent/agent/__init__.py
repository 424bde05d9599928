"""Agent invocation: registry, run contexts and the CLI subprocess runner."""

from bman_dev_agent.agent.base import CodeAgent, RunContext
from bman_dev_agent.agent.cli_agent import (
    AgentExitError,
    AgentInvocationError,
    AgentOutputMissingError,
    AgentSpawnError,
    CliAgent,
)
from bman_dev_agent.agent.registry import (
    BUILTIN_REGISTRY,
    AgentRegistryEntry,
    build_agent,
    merge_registry,
    resolve_agent_name,
)
from bman_dev_agent.agent.run_context import create_run_context

__all__ = [
    "BUILTIN_REGISTRY",
    "AgentExitError",
    "AgentInvocationError",
    "AgentOutputMissingError",
    "AgentRegistryEntry",
    "AgentSpawnError",
    "CliAgent",
    "CodeAgent",
    "RunContext",
    "build_agent",
    "create_run_context",
    "merge_registry",
    "resolve_agent_name",
]
