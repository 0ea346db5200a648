"""
Logging configuration for the creator tax engine.

Provides structured logging with:
- JSON formatting for production
- Human-readable formatting for development
- Tax calculation event logging for audit trails
"""

import inspect
import json
import logging
import sys
import time
from contextvars import ContextVar
from datetime import datetime
from contextlib import contextmanager
from functools import wraps
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional

from config.settings import LoggingSettings, get_logging_settings

# Context variable correlating log lines with the user being served
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs logs as JSON objects for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.utcfromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        user_id = user_id_var.get()
        if user_id:
            log_data["user_id"] = user_id

        if hasattr(record, 'extra_data'):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ReadableFormatter(logging.Formatter):
    """One line per record; context fields are appended as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        parts = [f"{timestamp} {record.levelname:8s} [{record.name}] {record.getMessage()}"]

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            parts.append(" ".join(f"{k}={v}" for k, v in extra_data.items()))

        line = " | ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that includes context in all log messages.
    """

    def process(self, msg: str, kwargs: Dict) -> tuple:
        """Merge adapter context and the current user into extra_data."""
        extra = kwargs.get('extra', {})
        extra_data = dict(self.extra)
        extra_data.update(extra.get('extra_data', {}))

        user_id = user_id_var.get()
        if user_id and 'user_id' not in extra_data:
            extra_data['user_id'] = user_id

        extra['extra_data'] = extra_data
        kwargs['extra'] = extra
        return msg, kwargs


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure application logging.

    Args:
        settings: Logging settings; read from LOG_* environment variables
            when omitted.
    """
    settings = settings or get_logging_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.level)
    root_logger.handlers.clear()

    formatter = JsonFormatter() if settings.json_output else ReadableFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.log_file:
        log_file = Path(settings.log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter())  # Always JSON for files
        root_logger.addHandler(file_handler)

    # Set levels for noisy libraries
    logging.getLogger("sklearn").setLevel(logging.WARNING)
    logging.getLogger("nltk").setLevel(logging.WARNING)


def get_logger(name: str, **extra) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__)
        **extra: Additional context to include in all logs

    Returns:
        ContextLogger instance
    """
    return ContextLogger(logging.getLogger(name), extra)


class CalculationLogger:
    """
    Audit logger for one tax estimation run.

    Records the period, the aggregated inputs, every tax component and the
    final totals with step timings.
    """

    def __init__(self, user_id: str, period_label: str, jurisdiction: str):
        self.logger = get_logger(
            "calculation",
            user_id=user_id,
            period=period_label,
            jurisdiction=jurisdiction,
        )
        self._start_time: Optional[float] = None
        self._step_times: Dict[str, int] = {}

    def start_calculation(self, **data) -> None:
        self._start_time = time.time()
        self.logger.info("Starting tax calculation", extra={'extra_data': data})

    def log_step(self, step_name: str, **data) -> float:
        """
        Log a calculation step.

        Returns:
            Start time to pass to complete_step().
        """
        self.logger.debug(
            f"Calculation step: {step_name}",
            extra={'extra_data': {'step': step_name, **data}}
        )
        return time.time()

    def complete_step(self, step_name: str, step_start: float, **result) -> None:
        duration_ms = int((time.time() - step_start) * 1000)
        self._step_times[step_name] = duration_ms
        self.logger.debug(
            f"Completed step: {step_name}",
            extra={'extra_data': {'step': step_name, 'duration_ms': duration_ms, **result}}
        )

    def log_aggregates(
        self,
        business_income: float,
        deductible_expenses: float,
        transaction_count: int,
    ) -> None:
        self.logger.info(
            "Period aggregated",
            extra={'extra_data': {
                'business_income': business_income,
                'deductible_expenses': deductible_expenses,
                'transaction_count': transaction_count,
            }}
        )

    def log_components(self, components: Dict[str, float]) -> None:
        self.logger.info("Tax components computed", extra={'extra_data': dict(components)})

    def log_result(
        self,
        total_tax_owed: float,
        estimated_quarterly_payment: float,
        effective_rate: float,
    ) -> None:
        """Log final calculation result."""
        duration_ms = int((time.time() - self._start_time) * 1000) if self._start_time else 0
        self.logger.info(
            "Calculation complete",
            extra={'extra_data': {
                'total_tax_owed': total_tax_owed,
                'estimated_quarterly_payment': estimated_quarterly_payment,
                'effective_rate': effective_rate,
                'duration_ms': duration_ms,
                'step_times': self._step_times,
            }}
        )

    def log_error(self, message: str, **data) -> None:
        self.logger.error(message, extra={'extra_data': data})


@contextmanager
def _timed(func_name: str) -> Iterator[None]:
    logger = get_logger("performance")
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        logger.error(
            f"{func_name} failed",
            extra={"extra_data": {"duration_ms": _elapsed_ms(start), "error": str(e)}},
        )
        raise
    logger.debug(
        f"{func_name} completed",
        extra={"extra_data": {"duration_ms": _elapsed_ms(start)}},
    )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def log_performance(name: Optional[str] = None) -> Callable:
    """
    Decorator to log function performance.

    Args:
        name: Optional name override for the log entry

    Returns:
        Decorator function
    """
    def decorator(func: Callable) -> Callable:
        func_name = name or func.__name__

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            with _timed(func_name):
                return await func(*args, **kwargs)

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            with _timed(func_name):
                return func(*args, **kwargs)

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
