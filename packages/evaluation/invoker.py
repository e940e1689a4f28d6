from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .errors import EvaluatorNotFoundError, EvaluatorTimeoutError
from .package import ensure_safe_package_name
from .workspace import Workspace

DEFAULT_OPA_PATH = "opa"
DEFAULT_TIMEOUT_SECONDS = 60.0

logger = logging.getLogger("policy_evaluator.invoker")


@dataclass(frozen=True, slots=True)
class ProcessResult:
    exit_code: int
    output: str


class ProcessRunner(Protocol):
    def invoke(self, args: Sequence[str], cwd: Path, timeout: float) -> ProcessResult:
        ...


class SubprocessRunner(ProcessRunner):
    """Runs the evaluator as a child process with stderr folded into stdout."""

    def invoke(self, args: Sequence[str], cwd: Path, timeout: float) -> ProcessResult:
        try:
            completed = subprocess.run(
                list(args),
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise EvaluatorNotFoundError(f"policy evaluator executable not found: {args[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            partial = exc.output or ""
            if isinstance(partial, bytes):
                partial = partial.decode("utf-8", errors="replace")
            raise EvaluatorTimeoutError(timeout, partial) from exc
        return ProcessResult(exit_code=completed.returncode, output=completed.stdout or "")


def explain_mode(debug_enabled: bool) -> str:
    return "full" if debug_enabled else "notes"


def build_command(opa_path: str, workspace: Workspace, package_name: str, explain: str) -> list[str]:
    package_name = ensure_safe_package_name(package_name)
    return [
        opa_path,
        "eval",
        "-f",
        "pretty",
        "--explain",
        explain,
        "-i",
        str(workspace.provenance_path),
        "-d",
        str(workspace.policy_path),
        f"data.{package_name}.violations",
    ]


def run_evaluator(
    runner: ProcessRunner,
    command: Sequence[str],
    workspace: Workspace,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> ProcessResult:
    """Run `command` to completion and persist its combined output to the result file."""
    try:
        result = runner.invoke(command, cwd=workspace.root, timeout=timeout)
    except EvaluatorTimeoutError as exc:
        workspace.result_path.write_text(exc.output, encoding="utf-8")
        raise
    workspace.result_path.write_text(result.output, encoding="utf-8")
    logger.debug("evaluator exited with %s", result.exit_code)
    return result
