"""Fresh per-attempt run contexts."""

from __future__ import annotations

import secrets
import string
from datetime import UTC, datetime
from pathlib import Path

from bman_dev_agent.agent.base import RunContext
from bman_dev_agent.tracker.models import Task

_RUN_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
_RUN_SUFFIX_LENGTH = 6


def create_run_context(
    *,
    task: Task,
    attempt: int,
    output_dir: Path,
    now: datetime | None = None,
) -> RunContext:
    """Build a context whose output file lives at ``<output_dir>/<task_id>/<run_id>.json``."""

    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    captured_at = now or datetime.now(UTC)
    timestamp = captured_at.strftime("%Y%m%d%H%M%S") + f"{captured_at.microsecond // 1000:03d}"
    run_id = f"run-{timestamp}-{_random_suffix()}"
    task_dir = Path(output_dir) / task.id
    task_dir.mkdir(parents=True, exist_ok=True)
    return RunContext(
        run_id=run_id,
        task_id=task.id,
        attempt=attempt,
        output_path=task_dir / f"{run_id}.json",
        timestamp=timestamp,
    )


def _random_suffix() -> str:
    return "".join(secrets.choice(_RUN_SUFFIX_ALPHABET) for _ in range(_RUN_SUFFIX_LENGTH))
