from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict

AUTH_TOKEN_KEY = "AuthToken"
HUB_NAME_KEY = "HubName"
PLAN_URL_KEY = "PlanUrl"
JOB_ID_KEY = "JobId"
PLAN_ID_KEY = "PlanId"
TIMELINE_ID_KEY = "TimelineId"
PROJECT_ID_KEY = "ProjectId"
TASK_INSTANCE_ID_KEY = "TaskInstanceId"
TASK_INSTANCE_NAME_KEY = "TaskInstanceName"
REQUEST_TYPE_KEY = "RequestType"

MANDATORY_PROPERTIES = [
    AUTH_TOKEN_KEY,
    HUB_NAME_KEY,
    PLAN_URL_KEY,
    JOB_ID_KEY,
    PLAN_ID_KEY,
    TIMELINE_ID_KEY,
]
OPTIONAL_PROPERTIES = [
    PROJECT_ID_KEY,
    TASK_INSTANCE_ID_KEY,
    TASK_INSTANCE_NAME_KEY,
    REQUEST_TYPE_KEY,
]
VALID_HUB_NAMES = ["Build", "Release", "Gates"]
REQUEST_TYPES = ("Execute", "Cancel")

RequestType = Literal["Execute", "Cancel"]


class TaskPropertiesError(ValueError):
    pass


class TaskProperties(BaseModel):
    model_config = ConfigDict(frozen=True)

    auth_token: str
    hub_name: str
    plan_url: str
    job_id: uuid.UUID
    plan_id: uuid.UUID
    timeline_id: uuid.UUID
    project_id: uuid.UUID | None = None
    task_instance_id: uuid.UUID | None = None
    task_instance_name: str | None = None
    request_type: RequestType = "Execute"


def _parse_guid(properties: Mapping[str, str], key: str) -> uuid.UUID:
    value = properties[key]
    try:
        return uuid.UUID(str(value).strip())
    except ValueError as exc:
        raise TaskPropertiesError(f"Invalid guid value '{value}' provided for {key}") from exc


def _parse_request_type(value: str | None) -> RequestType:
    for request_type in REQUEST_TYPES:
        if value and value.strip().lower() == request_type.lower():
            return request_type
    return "Execute"


def parse_task_properties(properties: Mapping[str, str]) -> TaskProperties:
    """Validate a flat pipeline property bag into `TaskProperties`.

    Every missing mandatory key is reported in a single error so callers can
    fix the request in one round trip.
    """
    missing = [key for key in MANDATORY_PROPERTIES if key not in properties]
    if missing:
        raise TaskPropertiesError(
            f"Required properties '{', '.join(missing)}' are missing. Please provide these values and try again."
        )

    hub_name = properties[HUB_NAME_KEY]
    if hub_name.lower() not in {name.lower() for name in VALID_HUB_NAMES}:
        raise TaskPropertiesError(
            f"Invalid hub name '{hub_name}'. Please provide valid hub name from '{', '.join(VALID_HUB_NAMES)}'."
        )

    return TaskProperties(
        auth_token=properties[AUTH_TOKEN_KEY],
        hub_name=hub_name,
        plan_url=properties[PLAN_URL_KEY],
        job_id=_parse_guid(properties, JOB_ID_KEY),
        plan_id=_parse_guid(properties, PLAN_ID_KEY),
        timeline_id=_parse_guid(properties, TIMELINE_ID_KEY),
        project_id=_parse_guid(properties, PROJECT_ID_KEY) if PROJECT_ID_KEY in properties else None,
        task_instance_id=(
            _parse_guid(properties, TASK_INSTANCE_ID_KEY) if TASK_INSTANCE_ID_KEY in properties else None
        ),
        task_instance_name=properties.get(TASK_INSTANCE_NAME_KEY),
        request_type=_parse_request_type(properties.get(REQUEST_TYPE_KEY)),
    )
