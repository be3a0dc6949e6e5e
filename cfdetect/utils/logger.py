"""Structured logging for cfdetect.

All modules log through structlog. While an inference runs, its id and
domain are bound with ``inference_context()`` and merged into every entry
by ``structlog.contextvars.merge_contextvars``, including entries logged
from the concurrent lookup tasks.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.types import Processor

from cfdetect.constants import SLOW_INFERENCE_WARN_MS


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True
) -> None:
    """Configure structlog for the service.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON lines. If False, use the console renderer.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "cfdetect") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def inference_context(inference_id: str, domain: str) -> Iterator[None]:
    """Bind ``inference_id`` and ``domain`` to every log entry inside the block.

    The previous bindings are restored on exit, even if the block raises.
    """
    with structlog.contextvars.bound_contextvars(inference_id=inference_id, domain=domain):
        yield


class InferenceTimer:
    """Times one inference and logs the outcome.

    Success is logged at DEBUG, or at WARNING once it exceeds ``warn_ms``.
    A failure is logged at ERROR with the exception type and is not suppressed.
    """

    def __init__(
        self,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
        warn_ms: float = SLOW_INFERENCE_WARN_MS,
    ):
        self.logger = logger or get_logger()
        self.warn_ms = warn_ms
        self._started: float = 0.0

    def __enter__(self) -> "InferenceTimer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        duration_ms = round((time.perf_counter() - self._started) * 1000, 2)

        if exc_type is not None:
            self.logger.error(
                "inference_failed",
                duration_ms=duration_ms,
                error_type=exc_type.__name__,
                error=str(exc_val),
            )
            return

        slow = duration_ms > self.warn_ms
        log_method = self.logger.warning if slow else self.logger.debug
        log_method("inference_timing", duration_ms=duration_ms, slow=slow)


# Defaults until main.py reconfigures from the environment
configure_logging()
