"""
Synchronous execution of hook snapshots.

Same ordering, cursor and unwind rules as the async executor, but nothing is
ever awaited. This has a known hazard that callers must keep in mind:

- A handler or error handler that returns an awaitable while an event loop
  is running is scheduled as a detached task and the trigger moves on as if
  it had completed. Its value is not recorded. If it later fails, the failure
  is reported to the loop's exception handler, outside the caller's control
  flow. It is never swallowed, and it cannot start an unwind.
- With no running loop the awaitable cannot make progress, so it is closed
  and HookMisuseError is raised as that entry's failure.

With ``strict_sync`` on, a snapshot containing handlers declared asynchronous
(``async def`` or callback-style) is rejected before any handler runs.
"""

import asyncio
import functools
import inspect
import time
from collections.abc import Iterable, Sequence
from typing import Any

from crisphooks.core.exceptions import HookMisuseError, HookUnwindError
from crisphooks.core.listeners import HookListener
from crisphooks.core.logger import get_logger
from crisphooks.core.types import HookEntry, Immediate, TriggerPhase, outcome_of
from crisphooks.execution.executor import BaseExecutor, new_trigger_id
from crisphooks.monitoring.logging import hook_scope

logger = get_logger(__name__)


class SyncExecutor(BaseExecutor):
    """Runs snapshots on the caller's stack."""

    def __init__(self, listeners: Iterable[HookListener] = (), strict: bool = True):
        super().__init__(listeners)
        self.strict = strict
        self._background_tasks: set[asyncio.Future] = set()

    def run(
        self,
        receiver: Any,
        hook_name: str,
        snapshot: Sequence[HookEntry],
        args: Sequence[Any],
    ) -> list[Any]:
        """
        Run every entry of ``snapshot`` in order without suspending.

        Raises:
            HookMisuseError: Before running anything, if strict and a handler
                is declared asynchronous
            Exception: The failing handler's exception, after the unwind
            HookUnwindError: If an error handler failed during the unwind
        """
        if not snapshot:
            return []

        if self.strict:
            self._check_sync(hook_name, snapshot, error_only=False)

        trigger_id = new_trigger_id()
        started = time.perf_counter()
        self._notify("on_trigger_start", hook_name, trigger_id, len(snapshot))

        with hook_scope(hook_name, trigger_id, TriggerPhase.FORWARD.value) as scope:
            try:
                results = self._run_forward(receiver, hook_name, snapshot, args, scope)
            except Exception as e:
                self._notify(
                    "on_trigger_failed", hook_name, trigger_id, e, time.perf_counter() - started
                )
                raise

        self._notify(
            "on_trigger_complete", hook_name, trigger_id, results, time.perf_counter() - started
        )
        return results

    def run_error(
        self,
        receiver: Any,
        hook_name: str,
        snapshot: Sequence[HookEntry],
        error: Any,
        args: Sequence[Any],
    ) -> None:
        """Run only the error handlers of ``snapshot``, last entry first."""
        if not snapshot:
            return

        if self.strict:
            self._check_sync(hook_name, snapshot, error_only=True)

        trigger_id = new_trigger_id()
        started = time.perf_counter()
        self._notify("on_trigger_start", hook_name, trigger_id, len(snapshot))

        with hook_scope(hook_name, trigger_id, TriggerPhase.UNWIND.value) as scope:
            try:
                self._unwind(receiver, hook_name, snapshot, len(snapshot) - 1, error, args, scope)
            except HookUnwindError as e:
                self._notify(
                    "on_trigger_failed", hook_name, trigger_id, e, time.perf_counter() - started
                )
                raise

        self._notify("on_trigger_complete", hook_name, trigger_id, [], time.perf_counter() - started)

    def _check_sync(self, hook_name: str, snapshot: Sequence[HookEntry], error_only: bool) -> None:
        for index, entry in enumerate(snapshot):
            if entry.async_error_handler or (entry.async_handler and not error_only):
                msg = (
                    f"Hook '{hook_name}' #{index} is asynchronous and cannot run in a "
                    f"synchronous trigger; await trigger() instead"
                )
                raise HookMisuseError(hook_name, msg)

    def _run_forward(self, receiver, hook_name, snapshot, args, scope) -> list[Any]:
        results: list[Any] = []

        for index, entry in enumerate(snapshot):
            scope["hook_index"] = index
            try:
                outcome = outcome_of(self._call(entry.handler, entry, receiver, args))
                if not isinstance(outcome, Immediate):
                    self._detach(hook_name, index, outcome.awaitable)
            except Exception as e:
                self._notify("on_handler_failure", hook_name, index, e)
                self._unwind(receiver, hook_name, snapshot, index - 1, e, args, scope)
                raise

            if isinstance(outcome, Immediate):
                results.append(outcome.value)
                self._notify("on_handler_success", hook_name, index, outcome.value)

        return results

    def _unwind(self, receiver, hook_name, snapshot, start, error, args, scope) -> None:
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
                if not isinstance(outcome, Immediate):
                    self._detach(hook_name, index, outcome.awaitable)
            except Exception as e:
                raise self._cleanup_failed(hook_name, index, error, e) from e

            self._notify("on_cleanup", hook_name, index, error)

    def _detach(self, hook_name: str, index: int, awaitable: Any) -> None:
        """Schedule an awaitable the synchronous trigger will not wait for."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            msg = (
                f"Hook '{hook_name}' #{index} returned an awaitable but no event loop "
                f"is running; use trigger() instead"
            )
            raise HookMisuseError(hook_name, msg) from None

        future = asyncio.ensure_future(awaitable)
        self._background_tasks.add(future)
        future.add_done_callback(functools.partial(self._report_detached, hook_name, index))
        logger.debug(f"Hook '{hook_name}' #{index} detached an awaitable from a sync trigger")

    def _report_detached(self, hook_name: str, index: int, future: asyncio.Future) -> None:
        """Surface a detached failure through the loop's exception handler."""
        self._background_tasks.discard(future)
        if future.cancelled():
            return

        error = future.exception()
        if error is None:
            return

        message = f"Detached awaitable from hook '{hook_name}' #{index} failed: {error!r}"
        logger.error(message)
        future.get_loop().call_exception_handler(
            {"message": message, "exception": error, "future": future}
        )
