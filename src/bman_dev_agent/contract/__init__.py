"""Output contract shared by the prompt builder and the result validator."""

from bman_dev_agent.contract.agent_output import (
    AGENT_OUTPUT_CONTRACT,
    AgentOutput,
    AgentOutputStatus,
    parse_agent_output,
    read_agent_output,
)
from bman_dev_agent.contract.schema import (
    EnumViolationError,
    FieldSpec,
    FieldType,
    LineLimitExceededError,
    MalformedInputError,
    MissingFieldError,
    OutputContract,
    OutputValidationError,
    SchemaValidator,
    TypeMismatchError,
    render_contract,
)

__all__ = [
    "AGENT_OUTPUT_CONTRACT",
    "AgentOutput",
    "AgentOutputStatus",
    "EnumViolationError",
    "FieldSpec",
    "FieldType",
    "LineLimitExceededError",
    "MalformedInputError",
    "MissingFieldError",
    "OutputContract",
    "OutputValidationError",
    "SchemaValidator",
    "TypeMismatchError",
    "parse_agent_output",
    "read_agent_output",
    "render_contract",
]
