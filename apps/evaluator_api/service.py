from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import HTTPException

from apps.evaluator_api.logging_utils import InvocationAdapter
from apps.evaluator_api.task_logger import RemoteTaskLogger
from packages.contracts.models import EvaluateRequest, EvaluateResponse
from packages.contracts.task_properties import TaskProperties, TaskPropertiesError, parse_task_properties
from packages.contracts.utils import new_invocation_id
from packages.evaluation import (
    DebugGateLogger,
    EvaluationInput,
    EvaluatorNotFoundError,
    EvaluatorTimeoutError,
    LogBuffer,
    LogSink,
    PolicyEvaluator,
    is_debug_enabled,
)

logger = logging.getLogger("policy_evaluator.service")

TaskLoggerFactory = Callable[[TaskProperties], LogSink]


def _close_sinks(sinks: list[LogSink]) -> None:
    for sink in sinks:
        close = getattr(sink, "close", None)
        if close is not None:
            close()


class EvaluatorService:
    def __init__(self, evaluator: PolicyEvaluator, task_logger_factory: TaskLoggerFactory = RemoteTaskLogger) -> None:
        self.evaluator = evaluator
        self.task_logger_factory = task_logger_factory

    def evaluate(self, req: EvaluateRequest) -> EvaluateResponse:
        invocation_id = new_invocation_id()
        log = InvocationAdapter(logger, {"invocation_id": invocation_id.hex})

        sinks: list[LogSink] = []
        if req.task_properties is not None:
            try:
                properties = parse_task_properties(req.task_properties)
            except TaskPropertiesError as exc:
                log.warning("rejected task properties: %s", exc)
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            sinks.append(self.task_logger_factory(properties))

        buffer = LogBuffer()
        sinks.append(buffer)
        debug_enabled = is_debug_enabled(req.variables)
        gate = DebugGateLogger(log, sinks=sinks, debug_enabled=debug_enabled)
        request = EvaluationInput(
            policy_text=req.policy,
            provenance_document=req.image_provenance,
            invocation_id=invocation_id,
            debug_enabled=debug_enabled,
        )

        try:
            outcome = self.evaluator.evaluate(request, gate)
        except EvaluatorTimeoutError as exc:
            log.error("evaluation timed out: %s", exc)
            raise HTTPException(status_code=504, detail=str(exc)) from exc
        except EvaluatorNotFoundError as exc:
            log.error("evaluator unavailable: %s", exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        finally:
            _close_sinks(sinks)

        log.info("evaluation finished exit_code=%s violations=%s", outcome.exit_code, len(outcome.violations))
        return EvaluateResponse(
            invocation_id=invocation_id.hex,
            violations=outcome.violations,
            output_log=outcome.diagnostic_log,
            log=buffer.text(),
            status=EvaluateResponse.status_for(outcome.violations),
        )
