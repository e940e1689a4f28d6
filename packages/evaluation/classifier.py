from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Protocol

UNDEFINED_RULE_MESSAGE = "violations is not defined in the policy. Please defined a rule called violations"

ARRAY_BLOCK_MARKER = "[\n"
EMPTY_ARRAY_MARKER = "[]"
_BARE_LINE_FEED = re.compile(r"(?<!\r)\n")

logger = logging.getLogger("policy_evaluator.classifier")


@dataclass(frozen=True, slots=True)
class ClassifiedOutput:
    violations: list[str] = field(default_factory=list)
    diagnostic_log: str = ""


class OutputClassifier(Protocol):
    def __call__(self, raw_output: str) -> ClassifiedOutput:
        ...


def _candidate_json(raw_output: str) -> str:
    index = raw_output.find(ARRAY_BLOCK_MARKER)
    logger.debug("index of array block marker: %s", index)
    if index < 0:
        index = raw_output.find(EMPTY_ARRAY_MARKER)
        logger.debug("index of empty array marker: %s", index)
    return raw_output[index:] if index >= 0 else ""


def _parse_array(candidate: str) -> list | None:
    if not candidate:
        return None
    try:
        value = json.loads(candidate)
    except ValueError:
        return None
    return value if isinstance(value, list) else None


def _rule_undefined(raw_output: str) -> bool:
    return raw_output.startswith("undefined") or raw_output.find("\nundefined") > 0


def normalize_line_endings(text: str) -> str:
    return _BARE_LINE_FEED.sub("\r\n", text)


def classify_output(raw_output: str) -> ClassifiedOutput:
    """Split raw `opa eval -f pretty` output into violations and a readable log.

    The evaluator prints prose (explanations, notes) around the result, so the
    JSON value is located by marker rather than parsed from the whole text.
    Nothing here raises on malformed output.
    """
    raw_output = raw_output or ""
    items = None if raw_output.startswith("undefined") else _parse_array(_candidate_json(raw_output))
    if items is not None:
        violations = [json.dumps(item, indent=2, ensure_ascii=False) for item in items]
    elif _rule_undefined(raw_output):
        violations = [UNDEFINED_RULE_MESSAGE]
    else:
        violations = []
    return ClassifiedOutput(violations=violations, diagnostic_log=normalize_line_endings(raw_output))
