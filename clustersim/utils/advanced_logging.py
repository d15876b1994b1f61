"""
Advanced Logging Module

Structured logging for the simulator, built on structlog:
- One configure_logging() call renders every log line as JSON or console text
- Each simulation run carries a run id that is attached to its log lines
- PerformanceLogger times an operation and reports points per second
"""

import contextlib
import contextvars
import functools
import logging
import logging.handlers
import os
import time
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

import structlog
from structlog.types import EventDict, Processor

_run_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("clustersim_run_id", default=None)


# =============================================================================
# Structured Logging Configuration
# =============================================================================


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    log_file: Optional[str] = None,
    service_name: str = "clustersim",
) -> None:
    """
    Route structlog through the stdlib logging tree.

    Args:
        log_level: Root level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for machine-readable lines, anything else for console
        log_file: Also append to this file, rotated at 5MB
        service_name: Value of the "service" field on every event
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    logging.basicConfig(format="%(message)s", level=level)
    logging.root.setLevel(level)

    if log_file:
        log_path = os.path.abspath(log_file)
        attached = [
            handler for handler in logging.root.handlers
            if getattr(handler, "baseFilename", None) == log_path
        ]
        if attached:
            for handler in attached:
                handler.setLevel(level)
        else:
            Path(log_path).parent.mkdir(parents=True, exist_ok=True)
            handler = logging.handlers.RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=2)
            handler.setLevel(level)
            logging.root.addHandler(handler)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_run_context(service_name),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    renderer = structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer()
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def add_run_context(service_name: str) -> Processor:
    """Processor that stamps the service name and the active run id."""

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["service"] = service_name
        run_id = _run_id.get()
        if run_id is not None:
            event_dict.setdefault("correlation_id", run_id)
        return event_dict

    return processor


# =============================================================================
# Run Correlation
# =============================================================================


class LogContext:
    """Access to the run id of the current simulation, kept in a context variable."""

    @staticmethod
    def get_correlation_id() -> Optional[str]:
        return _run_id.get()

    @staticmethod
    def clear_correlation_id() -> None:
        _run_id.set(None)

    @staticmethod
    @contextlib.contextmanager
    def correlation_context(correlation_id: str) -> Iterator[str]:
        """
        Scope a run id to a block; the previous id is restored on exit.

        Example:
            with LogContext.correlation_context("run-1f2e"):
                logger.info("clustering_started")  # carries correlation_id
        """
        token = _run_id.set(correlation_id)
        try:
            yield correlation_id
        finally:
            _run_id.reset(token)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """structlog logger for a module (usually called with __name__)."""
    return structlog.get_logger(name)


# =============================================================================
# Timing
# =============================================================================


class PerformanceLogger:
    """
    Times a block and logs one event when it ends.

    Logs "operation_completed" at the chosen level, or "operation_failed" at
    error level when the block raises. When the number of points is known the
    event also carries points_per_second.
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[Any] = None,
        log_level: str = "info",
        item_count: Optional[int] = None,
        **extra_context: Any,
    ):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.log_level = log_level
        self.item_count = item_count
        self.extra_context = extra_context
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = time.perf_counter()
        self.logger.debug("operation_started", operation=self.operation, **self.extra_context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.end_time = time.perf_counter()
        fields = {
            "operation": self.operation,
            "duration_ms": round(self.elapsed_time * 1000, 3),
            **self.extra_context,
        }
        if self.item_count:
            fields["points"] = self.item_count
            if self.elapsed_time > 0:
                fields["points_per_second"] = round(self.item_count / self.elapsed_time, 1)

        if exc_type is None:
            getattr(self.logger, self.log_level)("operation_completed", **fields)
        else:
            self.logger.error("operation_failed", error=str(exc_val), error_type=exc_type.__name__, **fields)

    @property
    def elapsed_time(self) -> float:
        """Seconds since the block started; final once the block has ended."""
        if self.start_time is None:
            return 0.0
        return (self.end_time or time.perf_counter()) - self.start_time


def timed(operation: Optional[str] = None, log_level: str = "info") -> Callable:
    """
    Decorator form of PerformanceLogger, logged under the function's module.

    Example:
        @timed(operation="generate_dataset", log_level="debug")
        def generate(self, dataset):
            ...
    """

    def decorator(func: Callable) -> Callable:
        func_logger = get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with PerformanceLogger(operation or func.__name__, logger=func_logger, log_level=log_level):
                return func(*args, **kwargs)

        return wrapper

    return decorator


@contextlib.contextmanager
def log_exceptions(
    logger: Optional[Any] = None,
    operation: Optional[str] = None,
    reraise: bool = True,
):
    """
    Log any exception raised in the block, then re-raise it unless told not to.

    Example:
        with log_exceptions(logger=logger, operation="load_points"):
            raw = json.loads(path.read_text())
    """
    log = logger or get_logger(__name__)
    try:
        yield
    except Exception as e:
        fields = {"error": str(e), "error_type": type(e).__name__}
        if operation:
            fields["operation"] = operation
        log.error("exception_caught", exc_info=True, **fields)
        if reraise:
            raise
