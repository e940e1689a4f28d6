from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from packages.evaluation.invoker import DEFAULT_OPA_PATH, DEFAULT_TIMEOUT_SECONDS


def _default_work_dir() -> Path:
    return Path(tempfile.gettempdir()) / "policy-evaluator"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(slots=True)
class Settings:
    opa_path: str = DEFAULT_OPA_PATH
    work_dir: Path = field(default_factory=_default_work_dir)
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    task_log_timeout_seconds: float = 10.0

    @classmethod
    def from_env(cls) -> "Settings":
        work_dir = os.getenv("POLICY_EVALUATOR_WORK_DIR", "").strip()
        return cls(
            opa_path=os.getenv("POLICY_EVALUATOR_OPA_PATH", "").strip() or DEFAULT_OPA_PATH,
            work_dir=Path(work_dir) if work_dir else _default_work_dir(),
            timeout_seconds=_float_env("POLICY_EVALUATOR_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            task_log_timeout_seconds=_float_env("POLICY_EVALUATOR_TASK_LOG_TIMEOUT_SECONDS", 10.0),
        )
