"""
Trigger lifecycle listeners.

Listeners observe triggers without taking part in them. Every method is a
no-op by default; subclasses override what they need. Listener methods are
plain synchronous callables because the synchronous executor has nothing to
await them with. A listener that raises is logged and ignored.

Example:
    >>> class AuditListener(HookListener):
    ...     def on_handler_failure(self, hook_name, index, error):
    ...         audit.record(hook_name, index, repr(error))
    >>>
    >>> hooks = CrispHooks(config=HooksConfig(listeners=[AuditListener()]))
"""

import inspect
from collections.abc import Iterable
from typing import Any

from crisphooks.core.logger import get_logger
from crisphooks.monitoring.metrics import HookMetrics

logger = get_logger(__name__)


class HookListener:
    """Base class for trigger lifecycle listeners"""

    def on_trigger_start(self, hook_name: str, trigger_id: str, size: int) -> None:
        """A trigger took its snapshot of ``size`` entries."""

    def on_handler_success(self, hook_name: str, index: int, result: Any) -> None:
        """Entry ``index`` completed with ``result``."""

    def on_handler_failure(self, hook_name: str, index: int, error: BaseException) -> None:
        """Entry ``index`` raised or its awaitable failed."""

    def on_cleanup(self, hook_name: str, index: int, error: Any) -> None:
        """The error handler of entry ``index`` completed."""

    def on_cleanup_failure(
        self, hook_name: str, index: int, error: Any, cleanup_error: BaseException
    ) -> None:
        """The error handler of entry ``index`` failed while unwinding ``error``."""

    def on_trigger_complete(
        self, hook_name: str, trigger_id: str, results: list[Any], duration: float
    ) -> None:
        """The trigger finished without error."""

    def on_trigger_failed(
        self, hook_name: str, trigger_id: str, error: BaseException, duration: float
    ) -> None:
        """The trigger finished by raising ``error``."""


class LoggingHookListener(HookListener):
    """Logs trigger lifecycle events through the crisphooks logger"""

    def __init__(self, logger_name: str = "crisphooks.triggers"):
        self.logger = get_logger(logger_name)

    def on_trigger_start(self, hook_name, trigger_id, size):
        self.logger.debug(f"Trigger {trigger_id} started: '{hook_name}' ({size} hooks)")

    def on_handler_failure(self, hook_name, index, error):
        self.logger.warning(f"Hook '{hook_name}' #{index} failed: {error!r}")

    def on_cleanup(self, hook_name, index, error):
        self.logger.info(f"Error handler '{hook_name}' #{index} ran for {error!r}")

    def on_cleanup_failure(self, hook_name, index, error, cleanup_error):
        self.logger.critical(
            f"Error handler '{hook_name}' #{index} FAILED while unwinding "
            f"{error!r}: {cleanup_error!r}"
        )

    def on_trigger_complete(self, hook_name, trigger_id, results, duration):
        self.logger.debug(
            f"Trigger {trigger_id} completed: '{hook_name}' in {duration * 1000:.2f}ms"
        )

    def on_trigger_failed(self, hook_name, trigger_id, error, duration):
        self.logger.warning(
            f"Trigger {trigger_id} failed: '{hook_name}' in {duration * 1000:.2f}ms - {error!r}"
        )


class MetricsHookListener(HookListener):
    """
    Feeds trigger outcomes into a metrics backend.

    Any object with ``record_trigger(hook_name, success, duration)`` and
    ``record_cleanup(hook_name, failed)`` works, e.g. HookMetrics or
    PrometheusMetrics.
    """

    def __init__(self, metrics: Any = None):
        self.metrics = metrics if metrics is not None else HookMetrics()

    def on_cleanup(self, hook_name, index, error):
        self.metrics.record_cleanup(hook_name, failed=False)

    def on_cleanup_failure(self, hook_name, index, error, cleanup_error):
        self.metrics.record_cleanup(hook_name, failed=True)

    def on_trigger_complete(self, hook_name, trigger_id, results, duration):
        self.metrics.record_trigger(hook_name, True, duration)

    def on_trigger_failed(self, hook_name, trigger_id, error, duration):
        self.metrics.record_trigger(hook_name, False, duration)


def notify_listeners(listeners: Iterable[HookListener], event_name: str, *args: Any) -> None:
    """Call ``event_name`` on every listener, isolating listener errors."""
    for listener in listeners:
        try:
            handler = getattr(listener, event_name, None)
            if handler is None:
                continue
            result = handler(*args)
            if inspect.iscoroutine(result):
                result.close()
                logger.warning(
                    f"Listener {type(listener).__name__}.{event_name} returned a coroutine; "
                    f"listeners must be synchronous"
                )
        except Exception as e:
            logger.warning(f"Listener {type(listener).__name__}.{event_name} error: {e}")


def default_listeners() -> list[HookListener]:
    return [LoggingHookListener(), MetricsHookListener()]
