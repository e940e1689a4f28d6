from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

EvaluationStatus = Literal["succeeded", "failed"]


class EvaluateRequest(BaseModel):
    policy: str = Field(max_length=1_000_000)
    image_provenance: str = Field(min_length=1, max_length=10_000_000)
    variables: dict[str, str | None] = Field(default_factory=dict)
    task_properties: dict[str, str] | None = None


class EvaluateResponse(BaseModel):
    invocation_id: str
    violations: list[str]
    output_log: str
    log: str = ""
    status: EvaluationStatus

    @classmethod
    def status_for(cls, violations: list[str]) -> EvaluationStatus:
        return "failed" if violations else "succeeded"
