"""
Structured Logging Configuration for Nova

Single-line JSON records in production, colored one-liners in development.
Records carry dialogue fields (session_id, intent, confidence, state, ...)
so a session can be followed with jq.
"""
import functools
import inspect
import json
import logging
import os
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

# Attributes every LogRecord has; anything else came in through extra={}
_STANDARD_ATTRS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'taskName',
})

# Context fields shown inline by the pretty formatter, in this order
_PRETTY_FIELDS = (
    'request_id', 'session_id', 'intent', 'confidence',
    'state', 'escalate', 'duration_ms', 'error_type',
)


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = {}
    for name, value in record.__dict__.items():
        if name in _STANDARD_ATTRS or name.startswith('_'):
            continue
        if isinstance(value, (str, int, float, bool, type(None), dict, list)):
            fields[name] = value
    return fields


class JSONFormatter(logging.Formatter):
    """
    Formats records as single-line JSON objects.

    Every field passed through extra={} (or log_with_context) that is
    JSON-serializable is copied to the top level of the object.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for name, value in _extra_fields(record).items():
            log_data.setdefault(name, value)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class PrettyFormatter(logging.Formatter):
    """
    Readable one-line formatter for development consoles.
    """

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m',
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']
        timestamp = datetime.now(timezone.utc).strftime('%H:%M:%S.%f')[:-3]

        parts = [
            f"{color}[{record.levelname}]{reset}",
            timestamp,
            f"{record.name}:",
            record.getMessage(),
        ]

        fields = _extra_fields(record)
        details = [f"{name}={fields[name]}" for name in _PRETTY_FIELDS if fields.get(name) is not None]
        if details:
            parts.append(f"({', '.join(details)})")

        result = ' '.join(parts)
        if record.exc_info:
            result += '\n' + self.formatException(record.exc_info)
        return result


def setup_logging(
    app_name: str = 'nova',
    log_level: str = 'INFO',
    log_format: str = 'json',
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure structured logging for the application.

    Module loggers (nova.extraction, nova.decision, ...) inherit the
    handlers installed on the app_name logger.

    Args:
        app_name: Name of the application logger
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type ('json' or 'pretty')
        log_file: Optional file path for file-based logging (always JSON)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logging('nova', 'DEBUG', 'pretty')
        >>> logger.info('Session started', extra={'session_id': 's-1'})
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(app_name)
    logger.setLevel(numeric_level)
    logger.handlers = []

    formatter = PrettyFormatter() if log_format == 'pretty' else JSONFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        try:
            directory = os.path.dirname(log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Failed to setup file logging: {e}")

    logger.propagate = False
    return logger


def generate_request_id() -> str:
    """
    Generate a short request ID for tracing one turn.

    Returns:
        8-character unique identifier
    """
    return str(uuid.uuid4())[:8]


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    request_id: Optional[str] = None,
    **kwargs
):
    """
    Log with additional context fields.

    Example:
        >>> log_with_context(
        ...     logger, logging.INFO, "State transition",
        ...     session_id="s-1", state="escalated", escalate=True
        ... )
    """
    if not logger.isEnabledFor(level):
        return
    extra = {}
    if request_id:
        extra['request_id'] = request_id
    extra.update(kwargs)
    logger.log(level, message, extra=extra)


# ============================================================================
# Function Call Logging Decorator
# ============================================================================

def log_function_call(level: str = 'DEBUG', truncate_at: int = 200):
    """
    Decorator logging call, completion (with timing) and failure of a function.

    Arguments are summarized (string lengths, collection sizes, scalars)
    rather than dumped, so messages never end up in INFO logs.

    Args:
        level: Log level for the call/completion records
        truncate_at: Truncate string results at this length

    Example:
        >>> @log_function_call()
        ... def analyze(self, message, context=None):
        ...     ...

        Produces logs:
        DEBUG: NLUPipeline.analyze() called (message_length=25, context=None)
        DEBUG: NLUPipeline.analyze() completed (duration_ms=1.2, intent=greeting)
    """
    def decorator(func: Callable) -> Callable:
        logger = logging.getLogger(func.__module__)
        log_level = getattr(logging, level.upper(), logging.DEBUG)

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            func_name = func.__qualname__
            enabled = logger.isEnabledFor(log_level)
            if enabled:
                logger.log(log_level, f"{func_name}() called",
                           extra=_summarize_args(func, args, kwargs))

            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = (time.perf_counter() - start_time) * 1000
                logger.error(
                    f"{func_name}() failed after {round(duration, 2)}ms",
                    extra={
                        'error_type': type(e).__name__,
                        'error_message': str(e),
                        'duration_ms': round(duration, 2),
                    },
                    exc_info=True
                )
                raise

            if enabled:
                info = _summarize_result(result, truncate_at)
                info['duration_ms'] = round((time.perf_counter() - start_time) * 1000, 2)
                logger.log(log_level, f"{func_name}() completed", extra=info)
            return result

        return wrapper
    return decorator


def _summarize_args(func, args, kwargs) -> Dict[str, Any]:
    try:
        bound = inspect.signature(func).bind_partial(*args, **kwargs)
    except (TypeError, ValueError):
        return {}

    info: Dict[str, Any] = {}
    for name, value in bound.arguments.items():
        if name == 'self':
            continue
        if isinstance(value, str):
            info[f'{name}_length'] = len(value)
        elif isinstance(value, (list, tuple, dict)):
            info[f'{name}_count'] = len(value)
        elif isinstance(value, (int, float, bool)) or value is None:
            info[name] = value
        else:
            info[name] = type(value).__name__
    return info


def _summarize_result(result, truncate_at: int) -> Dict[str, Any]:
    info: Dict[str, Any] = {}
    intent = getattr(result, 'intent', None)
    if intent is not None:
        info['intent'] = getattr(intent, 'value', str(intent))
    confidence = getattr(result, 'confidence', None)
    if isinstance(confidence, (int, float)):
        info['confidence'] = confidence
    if isinstance(result, (list, tuple)):
        info['result_count'] = len(result)
    elif isinstance(result, str):
        info['result'] = result[:truncate_at]
    return info
