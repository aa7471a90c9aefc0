"""
The hook container: register handlers under names and trigger them.

Quick Start:
    >>> from crisphooks import CrispHooks
    >>>
    >>> hooks = CrispHooks()
    >>> hooks.hook("save", validate, priority=-10)
    >>> hooks.hook("save", reserve_slot, release_slot)   # with error handler
    >>>
    >>> @hooks.register("save", priority=10)
    ... async def notify(doc):
    ...     await mailer.send(doc)
    >>>
    >>> results = await hooks.trigger("save", doc)
    >>> hooks.trigger_sync("render", page)              # no awaiting at all
    >>> await hooks.trigger_wrap("save", store, doc)     # pre-save, save, store(doc), post-save

Used as a mixin, the host object becomes the default receiver for bound hooks:
    >>> class Document(CrispHooks):
    ...     def __init__(self):
    ...         super().__init__()
    ...         self.hook("save", Document.touch, bind=True)
    ...
    ...     def touch(self):
    ...         self.updated_at = time.time()
"""

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

from crisphooks.core.config import HooksConfig, get_config
from crisphooks.core.exceptions import HookError
from crisphooks.core.registry import HookRegistry
from crisphooks.core.types import ErrorHandler, Handler
from crisphooks.execution.executor import AsyncExecutor
from crisphooks.execution.sync import SyncExecutor
from crisphooks.execution.wrap import pre_name, trigger_wrap

F = TypeVar("F", bound=Callable[..., Any])


class CrispHooks:
    """
    Named-hook container.

    Handlers registered under a name run in priority order (lower first,
    registration order on ties) whenever that name is triggered. Any handler
    may return an awaitable. Each handler can carry an error handler that
    undoes its work when a later handler for the same trigger fails.

    Every trigger operation takes an optional ``receiver`` keyword. Hooks
    registered with ``bind=True`` get it as their first argument. It defaults
    to the container itself.
    """

    def __init__(self, *args: Any, config: HooksConfig | None = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._hook_config = config or get_config()
        self._hooks = HookRegistry()
        listeners = self._hook_config.active_listeners
        self._async_executor = AsyncExecutor(listeners)
        self._sync_executor = SyncExecutor(listeners, strict=self._hook_config.strict_sync)

    @property
    def hook_config(self) -> HooksConfig:
        return self._hook_config

    @property
    def hook_registry(self) -> HookRegistry:
        return self._hooks

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def hook(
        self,
        name: str,
        handler: Handler,
        error_handler: ErrorHandler | None = None,
        priority: int | float = 0,
        *,
        bind: bool = False,
    ) -> "CrispHooks":
        """
        Add a hook that may be synchronous or asynchronous.

        Both the handler and the error handler may return an awaitable,
        meaning the result is available later. Anything else, or raising,
        is treated as synchronous completion.

        Args:
            name: The name of the event to add a hook to
            handler: Called with the trigger arguments. Should raise on error.
            error_handler: Called with ``(error, *args)`` only if a hook after
                this one fails, in reverse order of the handlers. Should clean
                up whatever the handler did.
            priority: Lower priorities run first (default: 0)
            bind: Pass the trigger receiver as the first argument

        Returns:
            self, for chaining
        """
        self._hooks.add_hook(name, handler, error_handler, priority, bind=bind)
        return self

    def hook_callback(
        self,
        name: str,
        handler: Callable[..., Any],
        error_handler: Callable[..., Any] | None = None,
        priority: int | float = 0,
    ) -> "CrispHooks":
        """
        Add a hook that reports completion through a callback.

        The handler is called as ``handler(done, *args)`` and must eventually
        call ``done()`` or ``done(error)``; ``done(None, result)`` records a
        result. The error handler is called as ``error_handler(done, error,
        *args)``. Such hooks are asynchronous and only run under ``trigger``.
        """
        wrapped_error_handler = (
            _callback_adapter(error_handler) if error_handler is not None else None
        )
        self._hooks.add_hook(
            name,
            _callback_adapter(handler),
            wrapped_error_handler,
            priority,
            async_only=True,
        )
        return self

    def register(
        self,
        name: str,
        priority: int | float = 0,
        error_handler: ErrorHandler | None = None,
        *,
        bind: bool = False,
    ) -> Callable[[F], F]:
        """
        Decorator form of :meth:`hook`.

        Example:
            >>> @hooks.register("save", priority=5, error_handler=rollback)
            ... def write(doc):
            ...     db.insert(doc)
        """

        def decorator(func: F) -> F:
            self.hook(name, func, error_handler, priority, bind=bind)
            return func

        return decorator

    def has_hooks(self, name: str) -> bool:
        return name in self._hooks

    def hook_names(self) -> list[str]:
        return self._hooks.names()

    # ------------------------------------------------------------------
    # Triggering
    # ------------------------------------------------------------------

    def trigger(
        self, name: str, *args: Any, receiver: Any = None
    ) -> Coroutine[Any, Any, list[Any]]:
        """
        Trigger an event and run its hooks one after another.

        The hooks are captured when this is called; hooks added before the
        returned coroutine is awaited do not take part.

        Args:
            name: The name of the event to trigger
            *args: Arguments supplied to every hook
            receiver: Passed to bound hooks (default: this container)

        Returns:
            One result per hook, in execution order. Empty if no hooks exist.

        Raises:
            Exception: The failing hook's exception, unchanged, after the
                error handlers of earlier hooks have run
            HookUnwindError: If one of those error handlers failed
        """
        snapshot = self._hooks.snapshot(name)
        return self._async_executor.run(self._receiver(receiver), name, snapshot, args)

    def trigger_sync(self, name: str, *args: Any, receiver: Any = None) -> list[Any]:
        """
        Trigger an event and run its hooks without awaiting anything.

        Awaitables returned by hooks are scheduled but not waited for, and
        their later failures go to the event loop's exception handler.

        Raises:
            HookMisuseError: If a hook is declared asynchronous (strict mode)
            Exception: The failing hook's exception, after the unwind
            HookUnwindError: If an error handler failed
        """
        snapshot = self._hooks.snapshot(name)
        return self._sync_executor.run(self._receiver(receiver), name, snapshot, args)

    def trigger_error(
        self, name: str, error: Any = None, *args: Any, receiver: Any = None
    ) -> Coroutine[Any, Any, None]:
        """
        Run only the error handlers of an event, last hook first.

        Args:
            name: The name of the event
            error: Passed to every error handler (default: a new HookError)
            *args: Passed to the error handlers after the error
            receiver: Passed to bound hooks (default: this container)

        Raises:
            HookUnwindError: If an error handler failed
        """
        snapshot = self._hooks.snapshot(name)
        return self._async_executor.run_error(
            self._receiver(receiver), name, snapshot, self._default_error(name, error), args
        )

    def trigger_error_sync(
        self, name: str, error: Any = None, *args: Any, receiver: Any = None
    ) -> None:
        """Synchronous :meth:`trigger_error`."""
        snapshot = self._hooks.snapshot(name)
        self._sync_executor.run_error(
            self._receiver(receiver), name, snapshot, self._default_error(name, error), args
        )

    def trigger_wrap(
        self,
        name: str,
        body: Callable[..., Any] | None,
        *args: Any,
        receiver: Any = None,
    ) -> Coroutine[Any, Any, Any]:
        """
        Trigger ``pre-<name>``, then ``<name>``, then run ``body(*args)``, then
        trigger ``post-<name>``. If anything fails, the error handlers of every
        stage that already ran are called, most recent stage first, and the
        original error is re-raised. The ``pre-<name>`` hooks are captured
        when this is called, each later stage when it starts.

        Returns:
            The body's return value (awaited if needed), or the post-stage
            results when ``body`` is None
        """
        receiver = self._receiver(receiver)
        pre_stage = self.trigger(pre_name(name), *args, receiver=receiver)
        return trigger_wrap(self, name, body, args, receiver, pre_stage)

    def _receiver(self, receiver: Any) -> Any:
        return self if receiver is None else receiver

    @staticmethod
    def _default_error(name: str, error: Any) -> Any:
        if error is None:
            return HookError(f"Error triggered for hook '{name}'")
        return error


def _callback_adapter(fn: Callable[..., Any]) -> Callable[..., "asyncio.Future[Any]"]:
    """Turn ``fn(done, *args)`` into a function returning a future."""

    def adapter(*args: Any) -> "asyncio.Future[Any]":
        future = asyncio.get_running_loop().create_future()

        def done(error: BaseException | None = None, result: Any = None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

        fn(done, *args)
        return future

    return adapter
