"""Agent interface for task execution."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True, slots=True)
class RunContext:
    """Per-attempt metadata; never persisted beyond the run directory."""

    run_id: str
    task_id: str
    attempt: int
    output_path: Path
    timestamp: str


class CodeAgent(Protocol):
    """Protocol implemented by agent runners."""

    name: str

    def run(self, prompt: str, ctx: RunContext) -> None:
        """Run one attempt; return only once the output file exists."""
