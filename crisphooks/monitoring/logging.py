"""
Structured logging for hook execution

Executors publish the running hook name, trigger id, phase and entry index in
a ContextVar. The formatter and filter below copy those fields onto every log
record emitted while a trigger runs, including records logged from inside
handlers.
"""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

# Context variables for propagating hook context
hook_context: ContextVar[dict[str, Any]] = ContextVar("hook_context", default={})


@contextmanager
def hook_scope(hook_name: str, trigger_id: str, phase: str) -> Iterator[dict[str, Any]]:
    """Publish trigger context for the duration of the block."""
    context = {
        "hook_name": hook_name,
        "trigger_id": trigger_id,
        "phase": phase,
        "hook_index": None,
    }
    token = hook_context.set(context)
    try:
        yield context
    finally:
        hook_context.reset(token)


class HookJsonFormatter(logging.Formatter):
    """
    JSON formatter for hook logs with structured fields
    """

    # Fields to extract from log record if present
    _EXTRA_FIELDS = (
        "hook_name",
        "trigger_id",
        "phase",
        "hook_index",
        "duration_ms",
        "error_type",
    )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON"""
        log_entry = self._build_base_entry(record)
        self._add_hook_context(log_entry)
        self._add_record_extras(log_entry, record)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)

    def _build_base_entry(self, record: logging.LogRecord) -> dict[str, Any]:
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

    def _add_hook_context(self, log_entry: dict[str, Any]) -> None:
        context = hook_context.get({})
        if context:
            log_entry.update(context)

    def _add_record_extras(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        for field in self._EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value


class HookContextFilter(logging.Filter):
    """
    Logging filter that adds hook context to log records
    """

    def filter(self, record: logging.LogRecord) -> bool:
        context = hook_context.get({})

        for field in ("hook_name", "trigger_id", "phase"):
            if not hasattr(record, field):
                setattr(record, field, context.get(field) or "-")
        if not hasattr(record, "hook_index"):
            index = context.get("hook_index")
            record.hook_index = "-" if index is None else index

        return True


def setup_hook_logging(
    log_level: str = "INFO", json_format: bool = True, include_console: bool = True
) -> logging.Logger:
    """
    Set up structured logging for the ``crisphooks`` logger namespace

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON formatting for structured logs
        include_console: Include console handler

    Returns:
        The configured ``crisphooks`` logger
    """
    root_logger = logging.getLogger("crisphooks")
    root_logger.setLevel(getattr(logging, log_level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if include_console:
        console_handler = logging.StreamHandler()
        console_handler.addFilter(HookContextFilter())

        if json_format:
            console_handler.setFormatter(HookJsonFormatter())
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - "
                "[%(hook_name)s#%(hook_index)s:%(phase)s] - %(message)s"
            )
            console_handler.setFormatter(formatter)

        root_logger.addHandler(console_handler)

    return root_logger
