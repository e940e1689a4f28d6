from __future__ import annotations

from fastapi import FastAPI

from apps.evaluator_api.logging_utils import configure_logging
from apps.evaluator_api.service import EvaluatorService, TaskLoggerFactory
from apps.evaluator_api.settings import Settings
from apps.evaluator_api.task_logger import RemoteTaskLogger
from packages.contracts.models import EvaluateRequest, EvaluateResponse
from packages.evaluation import PolicyEvaluator, ProcessRunner, SubprocessRunner

configure_logging()


def create_app(
    runner: ProcessRunner | None = None,
    settings: Settings | None = None,
    task_logger_factory: TaskLoggerFactory | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="Artifact Policy Evaluator API", version="0.1.0")
    evaluator = PolicyEvaluator(
        runner=runner or SubprocessRunner(),
        work_dir=settings.work_dir,
        opa_path=settings.opa_path,
        timeout_seconds=settings.timeout_seconds,
    )

    def _remote_logger(properties):
        return RemoteTaskLogger(properties, timeout_seconds=settings.task_log_timeout_seconds)

    service = EvaluatorService(evaluator=evaluator, task_logger_factory=task_logger_factory or _remote_logger)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/v1/evaluate", response_model=EvaluateResponse)
    def evaluate(req: EvaluateRequest) -> EvaluateResponse:
        return service.evaluate(req)

    return app


app = create_app()
