"""Local deterministic agent for CLI integration tests."""

from __future__ import annotations

import argparse
import json
import os
import re
import sys
from pathlib import Path

_TASK_SECTION = re.compile(r"^Task:\n(\S+) - ", re.MULTILINE)
_OUTPUT_FILE_SECTION = re.compile(r"^Output file:\n(.+)$", re.MULTILINE)


def main(argv: list[str] | None = None) -> int:
    """Read the prompt from stdin and write a contract-shaped result to OUTPUT_PATH."""

    parser = argparse.ArgumentParser()
    parser.add_argument("--status", default="success")
    parser.add_argument("--task-id", default=None, help="Report on this id instead of the prompt's.")
    parser.add_argument("--commit-message", default=None)
    parser.add_argument("--exit-code", type=int, default=0)
    parser.add_argument("--skip-output", action="store_true")
    parser.add_argument("--touch", default=None, help="Create this file to simulate a change.")
    parser.add_argument(
        "--output-from-prompt",
        action="store_true",
        help="Write to the prompt's output file path, relative to the working directory.",
    )
    args = parser.parse_args(argv)

    prompt = sys.stdin.read()
    match = _TASK_SECTION.search(prompt)
    task_id = args.task_id or (match.group(1) if match else "")
    print(f"echo_agent: received {len(prompt)} prompt chars for {task_id or '<unknown>'}")
    print("echo_agent: diagnostics go to stderr", file=sys.stderr)

    if args.touch:
        Path(args.touch).write_text(f"{task_id}\n", "utf-8")

    if not args.skip_output:
        output_match = _OUTPUT_FILE_SECTION.search(prompt) if args.output_from_prompt else None
        output_path = Path(output_match.group(1) if output_match else os.environ["OUTPUT_PATH"])
        output_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "taskId": task_id,
            "status": args.status,
            "commitMessage": args.commit_message or f"Resolve {task_id}",
            "changesMade": "Echoed the prompt.",
            "assumptions": "None",
            "decisionsTaken": "None",
            "pointsOfUnclarity": "None",
            "testsRun": "No tests ran.",
        }
        output_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
    return args.exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
