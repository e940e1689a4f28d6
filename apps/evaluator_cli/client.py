from __future__ import annotations

import httpx

from packages.contracts.models import EvaluateRequest, EvaluateResponse


class EvaluatorApiClient:
    def __init__(self, base_url: str, timeout_seconds: float = 120.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def evaluate(self, req: EvaluateRequest) -> EvaluateResponse:
        with httpx.Client(timeout=self.timeout_seconds) as client:
            resp = client.post(f"{self.base_url}/v1/evaluate", json=req.model_dump(mode="json"))
            resp.raise_for_status()
            return EvaluateResponse.model_validate(resp.json())
