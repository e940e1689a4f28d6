"""Policy evaluation pipeline around the external `opa` evaluator."""

from .classifier import UNDEFINED_RULE_MESSAGE, ClassifiedOutput, OutputClassifier, classify_output
from .errors import EvaluationError, EvaluatorNotFoundError, EvaluatorTimeoutError, UnsafePackageNameError
from .gate_logger import DEBUG_VARIABLE_NAME, DebugGateLogger, LogBuffer, LogSink, is_debug_enabled
from .invoker import ProcessResult, ProcessRunner, SubprocessRunner, build_command, explain_mode, run_evaluator
from .orchestrator import (
    MISSING_PACKAGE_MESSAGE,
    EvaluationInput,
    EvaluationOutcome,
    PolicyEvaluator,
    evaluate_policy,
)
from .package import ensure_safe_package_name, extract_package_name
from .workspace import Workspace, destroy, stage, staged_workspace, workspace_path

__all__ = [
    "ClassifiedOutput",
    "DEBUG_VARIABLE_NAME",
    "DebugGateLogger",
    "EvaluationError",
    "EvaluationInput",
    "EvaluationOutcome",
    "EvaluatorNotFoundError",
    "EvaluatorTimeoutError",
    "LogBuffer",
    "LogSink",
    "MISSING_PACKAGE_MESSAGE",
    "OutputClassifier",
    "PolicyEvaluator",
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "UNDEFINED_RULE_MESSAGE",
    "UnsafePackageNameError",
    "Workspace",
    "build_command",
    "classify_output",
    "destroy",
    "ensure_safe_package_name",
    "evaluate_policy",
    "explain_mode",
    "extract_package_name",
    "is_debug_enabled",
    "run_evaluator",
    "stage",
    "staged_workspace",
    "workspace_path",
]
