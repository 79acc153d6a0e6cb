"""
debug_trace.py

Trace instrumentation for StateSketch.

Messages go to the ``statesketch`` logger; ``configure_tracing`` attaches a
stderr handler and, optionally, a log file. Categories become a bracketed
prefix so mode transitions, imports, and crashes are easy to grep.
"""

import logging
import sys
import traceback
from functools import wraps
from typing import Optional

# Set to False to silence trace() without touching logger levels
DEBUG_TRACE = True

# Set to True to trace paint events (very verbose)
TRACE_PAINT = False

# Default log file (None for stderr only)
LOG_FILE = "statesketch_debug.log"

_logger = logging.getLogger("statesketch")

_CATEGORY_LEVELS = {
    "ERROR": logging.ERROR,
    "CRASH": logging.CRITICAL,
    "WARN": logging.WARNING,
}


def configure_tracing(log_file: Optional[str] = LOG_FILE, level: int = logging.DEBUG) -> None:
    """Attach stderr (and optional file) handlers to the trace logger."""
    if _logger.handlers:
        return
    fmt = logging.Formatter("[%(asctime)s.%(msecs)03d] %(message)s", datefmt="%H:%M:%S")

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(fmt)
    _logger.addHandler(stream)

    if log_file:
        try:
            fh = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        except OSError:
            _logger.warning("[WARN] could not open trace log %s", log_file)
        else:
            fh.setFormatter(fmt)
            _logger.addHandler(fh)

    _logger.setLevel(level)


def trace(msg: str, category: str = "INFO"):
    """Emit a trace message under *category*."""
    if not DEBUG_TRACE:
        return
    if category == "PAINT" and not TRACE_PAINT:
        return
    level = _CATEGORY_LEVELS.get(category, logging.DEBUG)
    _logger.log(level, "[%s] %s", category, msg)


def trace_exception(msg: str = "Exception"):
    """Trace the exception currently being handled."""
    if not DEBUG_TRACE:
        return
    trace(f"{msg}: {traceback.format_exc()}", "ERROR")


def trace_call(category: str = "CALL"):
    """Decorator to trace function calls."""
    def decorator(func):
        if not DEBUG_TRACE:
            return func

        @wraps(func)
        def wrapper(*args, **kwargs):
            func_name = func.__qualname__
            trace(f">>> {func_name}", category)
            try:
                result = func(*args, **kwargs)
                trace(f"<<< {func_name}", category)
                return result
            except Exception as e:
                trace(f"!!! {func_name} raised {type(e).__name__}: {e}", "ERROR")
                raise
        return wrapper
    return decorator


def close_log():
    """Flush and detach every trace handler."""
    for handler in list(_logger.handlers):
        handler.flush()
        handler.close()
        _logger.removeHandler(handler)
