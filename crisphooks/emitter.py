"""
EventEmitter-style aliases on top of a hook container.

``on`` registers a listener whose return value is ignored; ``emit`` runs the
listeners synchronously and re-raises the first failure.
"""

from collections.abc import Callable
from typing import Any

from crisphooks.hooks import CrispHooks


class EventEmitterHooks:
    """Forwards ``on``/``emit`` to ``hook``/``trigger_sync`` of a CrispHooks instance."""

    def __init__(self, hooks: CrispHooks | None = None):
        self.hooks = hooks if hooks is not None else CrispHooks()

    def on(self, name: str, listener: Callable[..., Any]) -> "EventEmitterHooks":
        def handler(*args: Any) -> None:
            listener(*args)

        self.hooks.hook(name, handler)
        return self

    def emit(self, name: str, *args: Any) -> None:
        self.hooks.trigger_sync(name, *args)
