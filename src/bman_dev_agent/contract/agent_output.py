"""Agent result contract and its typed Python view."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from bman_dev_agent.contract.schema import (
    EnumViolationError,
    FieldSpec,
    MalformedInputError,
    MissingFieldError,
    OutputContract,
    SchemaValidator,
)


class AgentOutputStatus(str, Enum):
    """Outcome reported by the agent."""

    SUCCESS = "success"
    BLOCKED = "blocked"
    FAILED = "failed"


AGENT_OUTPUT_CONTRACT = OutputContract(
    fields=(
        FieldSpec(
            name="taskId",
            description="The task id provided in the tasks file.",
        ),
        FieldSpec(
            name="status",
            description="Outcome of the task.",
            enum=tuple(status.value for status in AgentOutputStatus),
        ),
        FieldSpec(
            name="commitMessage",
            description=(
                "Full commit message (subject + body); imperative subject <=50 chars, "
                "blank line before body, ~72-char body focused on what/why."
            ),
            max_lines=10,
        ),
        FieldSpec(
            name="changesMade",
            description="What changed in this task; keep concise but specific.",
            max_lines=20,
        ),
        FieldSpec(
            name="assumptions",
            description='Assumptions made; include context or write "None" if not applicable.',
            max_lines=20,
        ),
        FieldSpec(
            name="decisionsTaken",
            description="Key decisions and rationale; include trade-offs considered.",
            max_lines=20,
        ),
        FieldSpec(
            name="pointsOfUnclarity",
            description='Open questions or unclear areas (write "None" if none).',
            max_lines=20,
        ),
        FieldSpec(
            name="testsRun",
            description="Tests run and outcomes; state explicitly if no tests ran.",
            max_lines=20,
        ),
    ),
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Wire field name -> AgentOutput attribute.
FIELD_ATTRIBUTES: dict[str, str] = {
    name: _CAMEL_BOUNDARY.sub("_", name).lower() for name in AGENT_OUTPUT_CONTRACT.field_names
}


@dataclass(frozen=True, slots=True)
class AgentOutput:
    """Validated result of one agent invocation."""

    task_id: str
    status: AgentOutputStatus
    commit_message: str
    changes_made: str
    assumptions: str
    decisions_taken: str
    points_of_unclarity: str
    tests_run: str

    @property
    def succeeded(self) -> bool:
        return self.status is AgentOutputStatus.SUCCESS

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> AgentOutput:
        """Build from a mapping already validated against ``AGENT_OUTPUT_CONTRACT``."""

        missing = [name for name in FIELD_ATTRIBUTES if payload.get(name) is None]
        if missing:
            raise MissingFieldError(missing[0])
        values = {attr: payload[name] for name, attr in FIELD_ATTRIBUTES.items()}
        try:
            values["status"] = AgentOutputStatus(values["status"])
        except ValueError as error:
            allowed = tuple(status.value for status in AgentOutputStatus)
            raise EnumViolationError("status", allowed) from error
        return cls(**values)


def parse_agent_output(text: str, contract: OutputContract = AGENT_OUTPUT_CONTRACT) -> AgentOutput:
    return AgentOutput.from_payload(SchemaValidator(contract).parse(text))


def read_agent_output(path: Path, contract: OutputContract = AGENT_OUTPUT_CONTRACT) -> AgentOutput:
    """Read the agent's result file and validate it against the contract."""

    try:
        text = Path(path).read_text("utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise MalformedInputError(f"Cannot read agent output at {path}: {error}") from error
    return parse_agent_output(text, contract)
