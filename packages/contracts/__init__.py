"""Shared contracts for the evaluator API and CLI."""

from .models import EvaluateRequest, EvaluateResponse, EvaluationStatus
from .task_properties import (
    MANDATORY_PROPERTIES,
    OPTIONAL_PROPERTIES,
    VALID_HUB_NAMES,
    TaskProperties,
    TaskPropertiesError,
    parse_task_properties,
)
from .utils import new_invocation_id

__all__ = [
    "EvaluateRequest",
    "EvaluateResponse",
    "EvaluationStatus",
    "MANDATORY_PROPERTIES",
    "OPTIONAL_PROPERTIES",
    "TaskProperties",
    "TaskPropertiesError",
    "VALID_HUB_NAMES",
    "new_invocation_id",
    "parse_task_properties",
]
