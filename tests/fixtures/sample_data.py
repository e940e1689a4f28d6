from __future__ import annotations

import json
from pathlib import Path

from packages.evaluation import ProcessResult

SAMPLE_POLICY = 'package images.provenance\nviolations["missing signature"] { not input.signature }\n'
SAMPLE_PROVENANCE = '{"builder": {"id": "https://example.test/builder"}, "materials": []}'
SAMPLE_OUTPUT = 'Result:\n[\n  "missing signature"\n]\n'

SAMPLE_JOB_ID = "0f0e9d2c-6b8a-4a3b-9d5e-1c2b3a4d5e6f"
SAMPLE_PLAN_ID = "1a2b3c4d-5e6f-4a7b-8c9d-0e1f2a3b4c5d"
SAMPLE_TIMELINE_ID = "2b3c4d5e-6f7a-4b8c-9d0e-1f2a3b4c5d6e"
SAMPLE_PROJECT_ID = "3c4d5e6f-7a8b-4c9d-0e1f-2a3b4c5d6e7f"

SAMPLE_TASK_PROPERTIES = {
    "AuthToken": "token-123",
    "HubName": "Release",
    "PlanUrl": "https://dev.azure.test/org/",
    "JobId": SAMPLE_JOB_ID,
    "PlanId": SAMPLE_PLAN_ID,
    "TimelineId": SAMPLE_TIMELINE_ID,
    "ProjectId": SAMPLE_PROJECT_ID,
}


class FakeRunner:
    """Stands in for the opa process; records each call and the staged inputs it saw."""

    def __init__(self, output: str = SAMPLE_OUTPUT, exit_code: int = 0, error: Exception | None = None) -> None:
        self.output = output
        self.exit_code = exit_code
        self.error = error
        self.calls: list[list[str]] = []
        self.cwds: list[Path] = []
        self.staged: list[dict[str, str]] = []

    def invoke(self, args, cwd, timeout):
        self.calls.append(list(args))
        self.cwds.append(Path(cwd))
        self.staged.append({p.name: p.read_text(encoding="utf-8") for p in Path(cwd).iterdir()})
        if self.error is not None:
            raise self.error
        return ProcessResult(exit_code=self.exit_code, output=self.output)


def violations_output(items: list) -> str:
    return "Result:\n" + json.dumps(items, indent=2) + "\n"
