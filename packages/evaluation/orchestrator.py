from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .classifier import OutputClassifier, classify_output
from .gate_logger import DebugGateLogger, LogSink, is_debug_enabled
from .invoker import (
    DEFAULT_OPA_PATH,
    DEFAULT_TIMEOUT_SECONDS,
    ProcessRunner,
    SubprocessRunner,
    build_command,
    explain_mode,
    run_evaluator,
)
from .package import SAFE_PACKAGE_PATTERN, extract_package_name
from .workspace import staged_workspace

MISSING_PACKAGE_MESSAGE = (
    "No package name could be inferred from the policy. Cannot continue execution. "
    "Ensure that policy contains a package name defined"
)

logger = logging.getLogger("policy_evaluator.orchestrator")


@dataclass(frozen=True, slots=True)
class EvaluationInput:
    policy_text: str
    provenance_document: str
    invocation_id: uuid.UUID = field(default_factory=uuid.uuid4)
    debug_enabled: bool = False


@dataclass(frozen=True, slots=True)
class EvaluationOutcome:
    exit_code: int | None
    raw_output: str
    violations: list[str]
    diagnostic_log: str


def _format_provenance(provenance_document: str, debug_enabled: bool) -> str:
    if not debug_enabled:
        return provenance_document
    try:
        return json.dumps(json.loads(provenance_document), indent=2, ensure_ascii=False)
    except ValueError:
        return provenance_document


class PolicyEvaluator:
    def __init__(
        self,
        runner: ProcessRunner | None = None,
        work_dir: Path | str = ".",
        opa_path: str = DEFAULT_OPA_PATH,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        classifier: OutputClassifier = classify_output,
    ) -> None:
        self.runner = runner or SubprocessRunner()
        self.work_dir = Path(work_dir)
        self.opa_path = opa_path
        self.timeout_seconds = timeout_seconds
        self.classifier = classifier

    def evaluate(self, request: EvaluationInput, gate: DebugGateLogger) -> EvaluationOutcome:
        package_name = extract_package_name(request.policy_text)
        gate.log(f"Package name : {package_name}")
        if not SAFE_PACKAGE_PATTERN.fullmatch(package_name):
            gate.log(MISSING_PACKAGE_MESSAGE, always_log=True)
            return EvaluationOutcome(
                exit_code=None,
                raw_output="",
                violations=[MISSING_PACKAGE_MESSAGE],
                diagnostic_log=MISSING_PACKAGE_MESSAGE,
            )

        with staged_workspace(
            self.work_dir,
            request.invocation_id,
            request.policy_text,
            request.provenance_document,
        ) as workspace:
            gate.logger.info("Folder created : %s", workspace.root)
            gate.log("Image provenance file created")
            provenance = _format_provenance(request.provenance_document, request.debug_enabled)
            gate.log(f"Image provenance : \r\n{provenance}")
            gate.log("Policy content file created")
            gate.log(f"Policy definitions : \r\n{request.policy_text}")

            command = build_command(self.opa_path, workspace, package_name, explain_mode(request.debug_enabled))
            gate.log(f"Command line: {' '.join(command)}")

            gate.log("Initiating evaluation", always_log=True)
            gate.log("Evaluation is in progress", always_log=True)
            result = run_evaluator(self.runner, command, workspace, timeout=self.timeout_seconds)
            gate.log("Evaluation complete. Processing result", always_log=True)
            gate.log(f"Completed executing with exit code {result.exit_code}")

            output = workspace.result_path.read_text(encoding="utf-8")
            gate.logger.info(output)

            if result.exit_code != 0:
                return EvaluationOutcome(
                    exit_code=result.exit_code,
                    raw_output=output,
                    violations=[f"Policy run had issues: {output}"],
                    diagnostic_log=output,
                )

            classified = self.classifier(output)
            gate.log(classified.diagnostic_log, always_log=True)
            return EvaluationOutcome(
                exit_code=result.exit_code,
                raw_output=output,
                violations=list(classified.violations),
                diagnostic_log=classified.diagnostic_log,
            )


def evaluate_policy(
    policy_text: str,
    provenance_document: str,
    variables: Mapping[str, str | None] | None = None,
    *,
    evaluator: PolicyEvaluator | None = None,
    sinks: list[LogSink] | None = None,
    invocation_id: uuid.UUID | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> EvaluationOutcome:
    debug_enabled = is_debug_enabled(variables)
    request = EvaluationInput(
        policy_text=policy_text,
        provenance_document=provenance_document,
        invocation_id=invocation_id or uuid.uuid4(),
        debug_enabled=debug_enabled,
    )
    gate = DebugGateLogger(log or logger, sinks=sinks, debug_enabled=debug_enabled)
    return (evaluator or PolicyEvaluator()).evaluate(request, gate)
