from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol

DEBUG_VARIABLE_NAME = "system.debug"


class LogSink(Protocol):
    def log(self, message: str) -> None:
        ...


def is_debug_enabled(variables: Mapping[str, str | None] | None) -> bool:
    if not variables:
        return False
    value = variables.get(DEBUG_VARIABLE_NAME)
    if not isinstance(value, str):
        return False
    return value.strip().lower() == "true"


class LogBuffer:
    """Collects forwarded lines so they can be returned with the evaluation result."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def log(self, message: str) -> None:
        self.lines.append(message)

    def text(self) -> str:
        return "\r\n".join(self.lines)


class DebugGateLogger:
    """Forwards every message to the primary logger and, when debug is on or the
    caller insists, to the task-facing sinks as well.

    Sink failures never propagate: a task log that cannot be written must not
    fail the evaluation.
    """

    def __init__(
        self,
        logger: logging.Logger | logging.LoggerAdapter,
        sinks: list[LogSink] | None = None,
        debug_enabled: bool = False,
    ) -> None:
        self.logger = logger
        self.sinks = list(sinks or [])
        self.debug_enabled = debug_enabled

    def log(self, message: str, always_log: bool = False) -> None:
        if always_log or self.debug_enabled:
            for sink in self.sinks:
                try:
                    sink.log(message)
                except Exception as exc:
                    self.logger.warning("task log sink %s failed: %s", type(sink).__name__, exc)
        self.logger.info(message)
