from __future__ import annotations

import json
from pathlib import Path

from .models import EvaluateRequest, EvaluateResponse
from .task_properties import TaskProperties


def export_schemas(output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    schemas = {
        "evaluate_request.schema.json": EvaluateRequest.model_json_schema(),
        "evaluate_response.schema.json": EvaluateResponse.model_json_schema(),
        "task_properties.schema.json": TaskProperties.model_json_schema(),
    }
    for name, schema in schemas.items():
        (output_dir / name).write_text(json.dumps(schema, indent=2), encoding="utf-8")


if __name__ == "__main__":
    export_schemas(Path(__file__).resolve().parent / "schemas")
