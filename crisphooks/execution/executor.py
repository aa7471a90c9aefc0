"""
Forward execution and reverse unwinding of hook snapshots.

A trigger runs the entries of one snapshot strictly one at a time. Handlers
may return a plain value or an awaitable; plain values are recorded without
suspending, awaitables are awaited before the next entry starts.

When entry ``i`` fails, the error handlers of entries ``i - 1`` down to ``0``
run in that order, each with ``(error, *args)``. Entries without an error
handler are skipped. The failing entry's own error handler never runs for its
own failure. Once the unwind finishes the original exception is re-raised
unchanged.

If an error handler itself fails, the unwind stops and HookUnwindError is
raised from the cleanup error. Callers must treat that as fatal for the
trigger: cleanup did not complete.
"""

import time
import uuid
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from crisphooks.core.exceptions import HookUnwindError
from crisphooks.core.listeners import HookListener, notify_listeners
from crisphooks.core.logger import get_logger
from crisphooks.core.types import HookEntry, Pending, TriggerPhase, outcome_of
from crisphooks.monitoring.logging import hook_scope

logger = get_logger(__name__)


def new_trigger_id() -> str:
    return uuid.uuid4().hex[:12]


class BaseExecutor:
    """State and helpers shared by the async and sync executors."""

    def __init__(self, listeners: Iterable[HookListener] = ()):
        self.listeners = list(listeners)

    def _notify(self, event_name: str, *args: Any) -> None:
        if self.listeners:
            notify_listeners(self.listeners, event_name, *args)

    @staticmethod
    def _call(fn: Callable[..., Any], entry: HookEntry, receiver: Any, args: Sequence[Any]) -> Any:
        if entry.bind:
            return fn(receiver, *args)
        return fn(*args)

    def _cleanup_failed(
        self,
        hook_name: str,
        index: int,
        error: Any,
        cleanup_error: BaseException,
    ) -> HookUnwindError:
        self._notify("on_cleanup_failure", hook_name, index, error, cleanup_error)
        logger.critical(
            f"Error handler #{index} for '{hook_name}' failed while unwinding "
            f"{error!r}: {cleanup_error!r}"
        )
        return HookUnwindError(hook_name, index, error, cleanup_error)


class AsyncExecutor(BaseExecutor):
    """
    Runs snapshots inside an event loop.

    Each call works on its own cursor and result list, so the same executor
    can serve any number of interleaved triggers.
    """

    async def run(
        self,
        receiver: Any,
        hook_name: str,
        snapshot: Sequence[HookEntry],
        args: Sequence[Any],
    ) -> list[Any]:
        """
        Run every entry of ``snapshot`` in order.

        Returns:
            One result per entry, in execution order

        Raises:
            Exception: The failing handler's exception, after the unwind
            HookUnwindError: If an error handler failed during the unwind
        """
        if not snapshot:
            return []

        trigger_id = new_trigger_id()
        started = time.perf_counter()
        self._notify("on_trigger_start", hook_name, trigger_id, len(snapshot))

        with hook_scope(hook_name, trigger_id, TriggerPhase.FORWARD.value) as scope:
            try:
                results = await self._run_forward(receiver, hook_name, snapshot, args, scope)
            except Exception as e:
                self._notify(
                    "on_trigger_failed", hook_name, trigger_id, e, time.perf_counter() - started
                )
                raise

        self._notify(
            "on_trigger_complete", hook_name, trigger_id, results, time.perf_counter() - started
        )
        return results

    async def run_error(
        self,
        receiver: Any,
        hook_name: str,
        snapshot: Sequence[HookEntry],
        error: Any,
        args: Sequence[Any],
    ) -> None:
        """
        Run only the error handlers of ``snapshot``, last entry first.

        Completes normally once every error handler has run.

        Raises:
            HookUnwindError: If an error handler failed
        """
        if not snapshot:
            return

        trigger_id = new_trigger_id()
        started = time.perf_counter()
        self._notify("on_trigger_start", hook_name, trigger_id, len(snapshot))

        with hook_scope(hook_name, trigger_id, TriggerPhase.UNWIND.value) as scope:
            try:
                await self._unwind(receiver, hook_name, snapshot, len(snapshot) - 1, error, args, scope)
            except HookUnwindError as e:
                self._notify(
                    "on_trigger_failed", hook_name, trigger_id, e, time.perf_counter() - started
                )
                raise

        self._notify("on_trigger_complete", hook_name, trigger_id, [], time.perf_counter() - started)

    async def _run_forward(self, receiver, hook_name, snapshot, args, scope) -> list[Any]:
        results: list[Any] = []

        for index, entry in enumerate(snapshot):
            scope["hook_index"] = index
            try:
                outcome = outcome_of(self._call(entry.handler, entry, receiver, args))
                if isinstance(outcome, Pending):
                    value = await outcome.awaitable
                else:
                    value = outcome.value
            except Exception as e:
                self._notify("on_handler_failure", hook_name, index, e)
                await self._unwind(receiver, hook_name, snapshot, index - 1, e, args, scope)
                raise

            results.append(value)
            self._notify("on_handler_success", hook_name, index, value)

        return results

    async def _unwind(self, receiver, hook_name, snapshot, start, error, args, scope) -> None:
        scope["phase"] = TriggerPhase.UNWIND.value

        for index in range(start, -1, -1):
            entry = snapshot[index]
            if entry.error_handler is None:
                continue

            scope["hook_index"] = index
            try:
                outcome = outcome_of(
                    self._call(entry.error_handler, entry, receiver, (error, *args))
                )
                if isinstance(outcome, Pending):
                    await outcome.awaitable
            except Exception as e:
                raise self._cleanup_failed(hook_name, index, error, e) from e

            self._notify("on_cleanup", hook_name, index, error)
