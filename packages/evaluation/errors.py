from __future__ import annotations


class EvaluationError(Exception):
    """Base class for failures that abort a policy evaluation."""


class UnsafePackageNameError(EvaluationError, ValueError):
    pass


class EvaluatorNotFoundError(EvaluationError):
    pass


class EvaluatorTimeoutError(EvaluationError):
    def __init__(self, timeout_seconds: float, output: str = "") -> None:
        self.timeout_seconds = timeout_seconds
        self.output = output
        super().__init__(f"policy evaluator did not finish within {timeout_seconds:g}s")
