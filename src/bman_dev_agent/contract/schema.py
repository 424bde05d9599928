"""Declarative output schema shared by prompt rendering and validation."""

from __future__ import annotations

import json
import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from bman_dev_agent.errors import BmanError

_LINE_BREAK = re.compile(r"\r?\n")


class FieldType(str, Enum):
    """JSON value types a contract field may declare."""

    STRING = "string"
    BOOLEAN = "boolean"
    STRING_LIST = "string[]"


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One contract field."""

    name: str
    description: str
    type: FieldType = FieldType.STRING
    required: bool = True
    max_lines: int | None = None
    enum: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class OutputContract:
    """Ordered field list; validation and prompt text both iterate it."""

    fields: tuple[FieldSpec, ...]

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self.fields)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)


class OutputValidationError(BmanError):
    """Agent output does not satisfy the contract."""


class MalformedInputError(OutputValidationError):
    """Input is not JSON or not a single JSON object."""


class MissingFieldError(OutputValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}")
        self.field = field


class TypeMismatchError(OutputValidationError):
    def __init__(self, field: str, expected_type: FieldType) -> None:
        super().__init__(f'Field "{field}" must be of type {expected_type.value}.')
        self.field = field
        self.expected_type = expected_type


class EnumViolationError(OutputValidationError):
    def __init__(self, field: str, allowed: tuple[str, ...]) -> None:
        super().__init__(f'Field "{field}" must be one of {format_options(allowed)}.')
        self.field = field
        self.allowed = allowed


class LineLimitExceededError(OutputValidationError):
    def __init__(self, field: str, limit: int, actual: int) -> None:
        super().__init__(f'Field "{field}" exceeds maxLines ({limit}); got {actual} lines.')
        self.field = field
        self.limit = limit
        self.actual = actual


class SchemaValidator:
    """Validate raw agent output against a contract without coercing values."""

    def __init__(self, contract: OutputContract) -> None:
        self.contract = contract

    def parse(self, text: str) -> dict[str, Any]:
        """Parse JSON text and validate it; see ``validate``."""

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as error:
            raise MalformedInputError(f"Agent output must be valid JSON: {error}") from error
        return self.validate(payload)

    def validate(self, payload: Any) -> dict[str, Any]:
        """Return only the contract's fields, in contract order; extra keys are dropped."""

        if not isinstance(payload, dict):
            raise MalformedInputError("Agent output must be a JSON object.")

        validated: dict[str, Any] = {}
        for spec in self.contract:
            value = payload.get(spec.name)
            if value is None:
                if spec.required:
                    raise MissingFieldError(spec.name)
                continue
            _check_type(spec, value)
            if spec.type is FieldType.STRING:
                _check_enum(spec, value)
                _check_max_lines(spec, value)
            validated[spec.name] = value
        return validated


def count_lines(value: str) -> int:
    return len(_LINE_BREAK.split(value))


def render_contract(contract: OutputContract) -> str:
    """One bullet per field: name, type, allowed values, line limit, description."""

    return "\n".join(_render_field(spec) for spec in contract)


def format_options(options: tuple[str, ...]) -> str:
    quoted = [f'"{option}"' for option in options]
    if len(quoted) == 1:
        return quoted[0]
    return f"{', '.join(quoted[:-1])}, or {quoted[-1]}"


def _render_field(spec: FieldSpec) -> str:
    annotations = [spec.type.value]
    if not spec.required:
        annotations.append("optional")
    if spec.enum:
        annotations.append(f"one of {format_options(spec.enum)}")
    if spec.max_lines:
        annotations.append(f"max {spec.max_lines} lines")
    return f"- {spec.name} ({', '.join(annotations)}): {spec.description}"


def _check_type(spec: FieldSpec, value: Any) -> None:
    if spec.type is FieldType.STRING:
        valid = isinstance(value, str)
    elif spec.type is FieldType.BOOLEAN:
        valid = isinstance(value, bool)
    else:
        valid = isinstance(value, list) and all(isinstance(item, str) for item in value)
    if not valid:
        raise TypeMismatchError(spec.name, spec.type)


def _check_enum(spec: FieldSpec, value: str) -> None:
    if spec.enum and value not in spec.enum:
        raise EnumViolationError(spec.name, spec.enum)


def _check_max_lines(spec: FieldSpec, value: str) -> None:
    if not spec.max_lines:
        return
    actual = count_lines(value)
    if actual > spec.max_lines:
        raise LineLimitExceededError(spec.name, spec.max_lines, actual)
