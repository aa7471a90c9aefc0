"""
Type definitions for hook storage and handler outcomes

A HookSet holds every entry registered under one name. Entries are immutable
and ordered by (priority, sequence); the set keeps a flag so that sorting
happens at most once per batch of registrations.
"""

import functools
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

Handler = Callable[..., Any]
ErrorHandler = Callable[..., Any]


class TriggerPhase(Enum):
    """Which half of a trigger is currently running"""

    FORWARD = "forward"
    UNWIND = "unwind"


@dataclass(frozen=True)
class HookEntry:
    """
    A single registered hook.

    Attributes:
        priority: Lower priorities run first
        sequence: Registration order within the set, unique and increasing
        handler: Called with the trigger arguments
        error_handler: Called with (error, *trigger_args) during an unwind
        bind: Pass the trigger receiver as the first positional argument
        async_handler: Handler is known to complete later
        async_error_handler: Error handler is known to complete later
    """

    priority: int | float
    sequence: int
    handler: Handler
    error_handler: ErrorHandler | None = None
    bind: bool = False
    async_handler: bool = False
    async_error_handler: bool = False

    @property
    def sort_key(self) -> tuple[int | float, int]:
        return (self.priority, self.sequence)

    @property
    def async_only(self) -> bool:
        return self.async_handler or self.async_error_handler


@dataclass
class HookSet:
    """All entries registered under one name"""

    name: str
    entries: list[HookEntry] = field(default_factory=list)
    counter: int = 0
    sorted: bool = True

    def append(
        self,
        handler: Handler,
        error_handler: ErrorHandler | None = None,
        priority: int | float = 0,
        bind: bool = False,
        async_handler: bool = False,
        async_error_handler: bool = False,
    ) -> HookEntry:
        entry = HookEntry(
            priority=priority,
            sequence=self.counter,
            handler=handler,
            error_handler=error_handler,
            bind=bind,
            async_handler=async_handler,
            async_error_handler=async_error_handler,
        )
        self.counter += 1
        self.entries.append(entry)
        if len(self.entries) > 1:
            self.sorted = False
        return entry

    def ensure_sorted(self) -> None:
        """Sort by (priority, sequence) unless already sorted."""
        if len(self.entries) <= 1 or self.sorted:
            return
        self.entries.sort(key=lambda entry: entry.sort_key)
        self.sorted = True

    def snapshot(self) -> tuple[HookEntry, ...]:
        self.ensure_sorted()
        return tuple(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class Immediate:
    """Handler finished synchronously with ``value``."""

    value: Any = None


@dataclass(frozen=True)
class Pending:
    """Handler returned an awaitable that settles later."""

    awaitable: Awaitable[Any]


HandlerOutcome = Union[Immediate, Pending]


def outcome_of(value: Any) -> HandlerOutcome:
    """Classify a handler's return value once, at the call site."""
    if inspect.isawaitable(value):
        return Pending(value)
    return Immediate(value)


def is_async_callable(fn: Any) -> bool:
    """
    True if ``fn`` is statically known to return an awaitable.

    Unwraps functools.partial and looks at ``__call__`` for callable objects.
    """
    while isinstance(fn, functools.partial):
        fn = fn.func
    if inspect.iscoroutinefunction(fn):
        return True
    call = getattr(fn, "__call__", None)
    return call is not None and not inspect.isfunction(fn) and inspect.iscoroutinefunction(call)
