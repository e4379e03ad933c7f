"""Timing and failure logging for calls that leave the process."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, ParamSpec, TypeVar

from stylisto_app.logging_config import ensure_correlation_id, get_logger, log_event, redact_for_log

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")


def _argument_preview(args: tuple, kwargs: Dict[str, Any]) -> Dict[str, Any]:
    # Positional values carry no key to redact by, so only their count is logged.
    return redact_for_log({"positional_count": len(args), **kwargs})


def instrument_call(operation: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log start, completion or failure of ``operation`` with its duration.

    Exceptions are logged and re-raised unchanged.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            started = time.perf_counter()
            log_event(
                LOGGER,
                logging.INFO,
                "call_started",
                operation=operation,
                correlation_id=correlation_id,
                arguments=_argument_preview(args, kwargs),
            )
            try:
                result = func(*args, **kwargs)
            except Exception:
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "call_failed",
                    operation=operation,
                    correlation_id=correlation_id,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                    exc_info=True,
                )
                raise
            log_event(
                LOGGER,
                logging.INFO,
                "call_completed",
                operation=operation,
                correlation_id=correlation_id,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_call"]
