from __future__ import annotations

import logging
import queue
import threading

import httpx

from packages.contracts.task_properties import TaskProperties

FEED_API_VERSION = "4.1"

logger = logging.getLogger("policy_evaluator.task_logger")

_STOP = object()


def timeline_feed_url(properties: TaskProperties) -> str:
    base = properties.plan_url.rstrip("/")
    if properties.project_id:
        base = f"{base}/{properties.project_id}"
    return (
        f"{base}/_apis/distributedtask/hubs/{properties.hub_name}/plans/{properties.plan_id}"
        f"/timelines/{properties.timeline_id}/records/{properties.job_id}/feed"
    )


class RemoteTaskLogger:
    """Appends lines to the pipeline job's live console feed.

    `log` only enqueues; a daemon thread drains the queue over one reused
    client. After the first failed post the remaining messages are dropped.
    Call `close` when the request ends to flush what is pending.
    """

    def __init__(
        self,
        properties: TaskProperties,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
        flush_timeout_seconds: float = 15.0,
    ) -> None:
        self.properties = properties
        self._url = timeline_feed_url(properties)
        self._flush_timeout = flush_timeout_seconds
        self._client = httpx.Client(
            timeout=timeout_seconds,
            transport=transport,
            headers={"Authorization": f"Bearer {properties.auth_token}"},
        )
        self._queue: queue.Queue = queue.Queue()
        self.failed = False
        self._closed = False
        self._thread = threading.Thread(target=self._drain, name="task-log-feed", daemon=True)
        self._thread.start()

    def log(self, message: str) -> None:
        if self._closed or self.failed:
            return
        self._queue.put(message)

    def _post(self, message: str) -> None:
        lines = message.splitlines() or [""]
        response = self._client.post(
            self._url,
            params={"api-version": FEED_API_VERSION},
            json={"value": lines, "count": len(lines)},
        )
        response.raise_for_status()

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            if self.failed:
                continue
            try:
                self._post(item)
            except httpx.HTTPError as exc:
                self.failed = True
                logger.warning("task log feed unavailable, dropping further lines: %s", exc)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._thread.join(timeout=self._flush_timeout)
        if self._thread.is_alive():
            logger.warning("task log feed still busy after %ss; abandoning pending lines", self._flush_timeout)
            return
        self._client.close()
