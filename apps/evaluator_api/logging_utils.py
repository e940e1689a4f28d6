from __future__ import annotations

import logging
import sys


class _InvocationDefaults(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "invocation_id"):
            record.invocation_id = "n/a"
        return True


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s invocation_id=%(invocation_id)s message=%(message)s",
        stream=sys.stdout,
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, _InvocationDefaults) for f in handler.filters):
            handler.addFilter(_InvocationDefaults())


class InvocationAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        kwargs.setdefault("extra", {})
        kwargs["extra"].setdefault("invocation_id", self.extra.get("invocation_id", "n/a"))
        return msg, kwargs
