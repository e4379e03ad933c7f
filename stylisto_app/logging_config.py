"""JSON logging, correlation ids and log redaction for the Stylisto service.

Every record is emitted as one JSON object. Fields passed through ``extra``
(or :func:`log_event`) are copied into the object after being scrubbed of
user identifiers and image payloads, which travel through the try-on path as
base64 data URIs and would otherwise flood the logs.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import time
import uuid
from typing import Any, Dict, Iterator

CORRELATION_ID: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

SENSITIVE_KEYS = frozenset(
    {
        "user_id",
        "email",
        "location",
        "notes",
        "image_url",
        "user_image",
        "user_image_url",
        "clothing_images",
        "result_image",
        "generated_image_url",
    }
)
_EMAIL = re.compile(r"[\w.\-]+@[\w.\-]+")
_MAX_STRING = 256


def _scrub_text(value: str) -> str:
    if value.startswith("data:"):
        return "[redacted-data-uri]"
    if _EMAIL.search(value):
        return _EMAIL.sub("[redacted-email]", value)
    if value.lower().startswith(("http://", "https://")):
        return "[redacted-url]"
    if len(value) > _MAX_STRING:
        return f"[truncated {len(value)} chars]"
    return value


def redact_for_log(payload: Any) -> Any:
    """Return a JSON-safe copy of ``payload`` with sensitive values masked."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _scrub_text(payload)
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if key in SENSITIVE_KEYS else redact_for_log(value)
            for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple, set, frozenset)):
        return [redact_for_log(value) for value in payload]
    return str(payload)


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "event": getattr(record, "event", record.getMessage()),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and key not in payload
        }
        payload.update(redact_for_log(extras))
        return json.dumps(payload)


def configure_logging(level: int | str | None = None) -> None:
    """Route the root logger through a single JSON stream handler.

    ``LOG_LEVEL`` sets the level when ``level`` is not given.
    """

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level or os.getenv("LOG_LEVEL", "INFO"), handlers=[handler], force=True)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Adopt ``correlation_id`` if given, otherwise keep or mint the current one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    minted = uuid.uuid4().hex
    CORRELATION_ID.set(minted)
    return minted


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    token = CORRELATION_ID.set(correlation_id or uuid.uuid4().hex)
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with structured, redacted fields.

    ``name`` and ``message`` clash with LogRecord attributes and must not be
    used as field names.
    """

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={"event": event, "correlation_id": correlation_id, **redact_for_log(fields)},
    )


@contextlib.contextmanager
def operation_context(operation: str, correlation_id: str | None = None) -> Iterator[str]:
    """Keep one correlation id for a user-facing operation and log its duration.

    An id already bound by the caller (for example the HTTP middleware) is
    reused.
    """

    logger = logging.getLogger(__name__)
    started = time.perf_counter()
    with correlation_context(correlation_id or CORRELATION_ID.get()) as scoped_id:
        try:
            yield scoped_id
        finally:
            logger.debug(
                "operation finished",
                extra={
                    "event": "operation_finished",
                    "operation": operation,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )


__all__ = [
    "CORRELATION_ID",
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
]
